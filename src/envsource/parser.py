"""Parse ``env``/``set`` style output into a mapping."""

import re
from collections.abc import Mapping

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def _is_valid_key(key: str) -> bool:
    return bool(key) and not any(ch.isspace() for ch in key)


def parse_env_dump(raw_text: str) -> dict[str, str]:
    """Return the KEY=VALUE pairs found in raw_text.

    Lines without ``=``, starting with ``=``, or whose key contains
    whitespace (shell banners, warnings) are skipped. Values are kept
    verbatim and may contain ``=``.
    """
    parsed: dict[str, str] = {}
    for line in _LINE_SPLIT_RE.split(raw_text):
        if not line.strip():
            continue
        index = line.find("=")
        if index <= 0:
            continue
        key = line[:index]
        if not _is_valid_key(key):
            continue
        parsed[key] = line[index + 1 :]
    return parsed


def format_env_dump(env: Mapping[str, str]) -> str:
    """Render a mapping as KEY=VALUE lines."""
    return "".join(f"{key}={value}\n" for key, value in env.items())


def diff_environments(base: Mapping[str, str], sourced: Mapping[str, str]) -> dict[str, str]:
    """Return the entries of sourced that are new or differ from base."""
    return {key: value for key, value in sourced.items() if base.get(key) != value}
