"""`envsource detect` and `envsource pep668` command implementations."""

import argparse
import json

from envsource.cli.shared import configure_logging
from envsource.environment import check_externally_managed_environment
from envsource.shell.detection import detect_user_shell
from envsource.shell.toolchain import find_toolchain_installations


def run_detect(argv: list[str]) -> int:
    """Print the detected shell and any discovered toolchains."""
    parser = argparse.ArgumentParser(
        prog="envsource detect",
        description="Show how setup scripts would be sourced on this machine",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--json", action="store_true", help="Print as JSON")
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    info = detect_user_shell()
    toolchains = find_toolchain_installations()
    if args.json:
        print(json.dumps({**info.to_dict(), "toolchains": toolchains}, indent=2))
        return 0

    print(f"shell: {info.name.value}")
    print(f"executable: {info.executable}")
    print(f"script extension: {info.script_extension}")
    print(f"source command: {info.source_command}")
    for path in toolchains:
        print(f"toolchain: {path}")
    return 0


def run_pep668(argv: list[str]) -> int:
    """Print whether python3 is an externally managed environment."""
    parser = argparse.ArgumentParser(
        prog="envsource pep668",
        description="Check whether python3 is marked EXTERNALLY-MANAGED (PEP 668)",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    managed = check_externally_managed_environment()
    print("externally managed" if managed else "not externally managed")
    return 0
