"""Path helpers."""

import os


def make_workspace_relative(absolute_path: str | None, workspace_root: str | None) -> str:
    """Return absolute_path relative to workspace_root when it lies inside it."""
    if not absolute_path or not workspace_root:
        return absolute_path or ""

    normalized = os.path.normpath(absolute_path)
    root = os.path.normpath(workspace_root)
    root_with_sep = root if root.endswith(os.sep) else root + os.sep

    if normalized == root or normalized.startswith(root_with_sep):
        return os.path.relpath(normalized, root)
    return absolute_path
