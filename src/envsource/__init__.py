"""Capture the environment produced by sourcing a shell setup script."""

__version__ = "0.1.0"

from envsource.environment import check_externally_managed_environment
from envsource.models import ExecutionPlan, ShellInfo, ShellKind, SourceSetupOptions
from envsource.parser import parse_env_dump
from envsource.paths import make_workspace_relative
from envsource.process import (
    SourceSetupError,
    execute_plan,
    source_setup_file,
    source_setup_file_sync,
)
from envsource.shell import (
    build_setup_command,
    detect_user_shell,
    find_toolchain_installations,
    get_setup_script_extension,
)

__all__ = [
    "ExecutionPlan",
    "ShellInfo",
    "ShellKind",
    "SourceSetupError",
    "SourceSetupOptions",
    "__version__",
    "build_setup_command",
    "check_externally_managed_environment",
    "detect_user_shell",
    "execute_plan",
    "find_toolchain_installations",
    "get_setup_script_extension",
    "make_workspace_relative",
    "parse_env_dump",
    "source_setup_file",
    "source_setup_file_sync",
]
