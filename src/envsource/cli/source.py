"""`envsource source` command implementation."""

import argparse
import logging
import os
import sys

from envsource import __version__
from envsource.cli.shared import configure_logging, print_to_stderr, render_env
from envsource.config import load_options
from envsource.parser import diff_environments
from envsource.process import SourceSetupError, source_setup_file_sync

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the source command."""
    parser = argparse.ArgumentParser(
        prog="envsource",
        description="Source a setup script in your shell and print the resulting environment",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Stream shell diagnostics to stderr while sourcing",
    )
    parser.add_argument("setup_file", help="Setup script to source (setup.bash, setup.bat, ...)")
    parser.add_argument("--cwd", help="Working directory for the shell (default: current)")
    parser.add_argument(
        "--aux-root",
        help="pixi workspace to activate first on Windows (default: $ENVSOURCE_AUX_ROOT or c:\\pixi_ws)",
    )
    parser.add_argument("--json", action="store_true", help="Print the environment as JSON")
    parser.add_argument(
        "--changed",
        action="store_true",
        help="Only print variables added or changed by the setup script",
    )
    parser.add_argument(
        "--clean-env",
        action="store_true",
        help="Start from an empty environment instead of the current one",
    )
    return parser


def run(argv: list[str]) -> int:
    """Execute the source command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    options = load_options(
        cwd=args.cwd,
        aux_root=args.aux_root,
        on_output=print_to_stderr if args.verbose else None,
    )
    base_env = {} if args.clean_env else dict(os.environ)
    setup_file = os.path.abspath(args.setup_file)
    log.debug("setup_file=%s cwd=%s", setup_file, options.resolved_cwd())

    try:
        env = source_setup_file_sync(setup_file, base_env, options)
    except SourceSetupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.changed:
        env = diff_environments(base_env, env)
    sys.stdout.write(render_env(env, args.json))
    return 0
