"""Shell detection, toolchain discovery and setup command synthesis."""

from envsource.shell.detection import detect_user_shell, get_setup_script_extension
from envsource.shell.synthesis import build_setup_command
from envsource.shell.toolchain import find_toolchain_installations, locate_aux_activator

__all__ = [
    "build_setup_command",
    "detect_user_shell",
    "find_toolchain_installations",
    "get_setup_script_extension",
    "locate_aux_activator",
]
