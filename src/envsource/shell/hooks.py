"""Temporary batch scripts that chain Windows environment activation steps."""

import os
import tempfile
import time

from envsource import config


def unique_stamp() -> str:
    """Return a per-call token for temp file names."""
    return f"{os.getpid()}_{time.time_ns()}"


def temp_script_path(prefix: str, stamp: str) -> str:
    """Return the temp dir path for a batch script with this prefix and stamp."""
    return os.path.join(tempfile.gettempdir(), f"{prefix}{stamp}.bat")


def render_toolchain_block(toolchain_paths: list[str]) -> list[str]:
    """Call the first existing toolchain activator, then skip the rest."""
    lines: list[str] = []
    for vcvars in toolchain_paths:
        lines.append(f'if exist "{vcvars}" (')
        lines.append(f'    call "{vcvars}" {config.TOOLCHAIN_ARCH}')
        lines.append("    goto :toolchain_done")
        lines.append(")")
    lines.append(":toolchain_done")
    return lines


def render_aux_env_block(aux_root: str, activator: str | None, hook_path: str) -> list[str]:
    """Activate the auxiliary environment through its shell hook."""
    if activator is None:
        return [f"REM {config.AUX_ACTIVATOR} environment skipped: not available under {aux_root}"]
    hook_args = " ".join(config.AUX_HOOK_ARGS)
    return [
        f"REM Setup {config.AUX_ACTIVATOR} environment",
        f'cd /d "{aux_root}"',
        f'"{activator}" {hook_args} > "{hook_path}" 2>nul',
        f'if exist "{hook_path}" (',
        f'    call "{hook_path}"',
        ") else (",
        f"    echo {config.AUX_ACTIVATOR} shell hook failed to generate environment file",
        ")",
    ]


def render_setup_script(
    target_file: str,
    toolchain_paths: list[str],
    aux_root: str,
    activator: str | None,
    hook_path: str,
) -> str:
    """Render the composite batch script; ends by dumping the environment."""
    lines = ["@echo off", "REM Composite environment setup script"]
    lines.extend(render_toolchain_block(toolchain_paths))
    lines.extend(render_aux_env_block(aux_root, activator, hook_path))
    lines.append(f'call "{target_file}"')
    lines.append("set")
    return "\r\n".join(lines) + "\r\n"


def write_setup_script(content: str, path: str) -> str:
    """Write a batch script to a fresh path; fails if the path already exists.

    A file this call created but could not finish writing is removed before
    the error propagates. An existing file at path is never touched.
    """
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except (OSError, UnicodeError):
        os.unlink(path)
        raise
    return path
