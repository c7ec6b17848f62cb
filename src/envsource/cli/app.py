"""Top-level CLI router."""

import sys

from . import detect as detect_cmd
from . import source as source_cmd


def main(argv: list[str] | None = None) -> int:
    """Route to the detect, pep668 or source command."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "detect":
        return detect_cmd.run_detect(args[1:])
    if args and args[0] == "pep668":
        return detect_cmd.run_pep668(args[1:])
    if args and args[0] == "source":
        args = args[1:]
    return source_cmd.run(args)


def entrypoint() -> None:
    """Console script entrypoint."""
    raise SystemExit(main())
