"""Shared CLI helpers."""

import json
import logging
import sys
from collections.abc import Mapping

from envsource.parser import format_env_dump


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )


def print_to_stderr(message: str) -> None:
    print(message, file=sys.stderr)


def render_env(env: Mapping[str, str], as_json: bool) -> str:
    """Return env as sorted KEY=VALUE lines or a JSON object."""
    ordered = dict(sorted(env.items()))
    if as_json:
        return json.dumps(ordered, indent=2) + "\n"
    return format_env_dump(ordered)
