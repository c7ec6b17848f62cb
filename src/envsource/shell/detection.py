"""Shell detection."""

import os
import sys
from collections.abc import Mapping

from envsource.models import ShellInfo, ShellKind

DEFAULT_SHELL = "/bin/bash"

CMD_SHELL = ShellInfo(
    name=ShellKind.CMD,
    executable="cmd",
    script_extension=".bat",
    source_command="call",
)

# basename -> (kind, script extension, source command)
_SHELL_TABLE: dict[str, tuple[ShellKind, str, str]] = {
    "zsh": (ShellKind.ZSH, ".zsh", "source"),
    "fish": (ShellKind.FISH, ".fish", "source"),
    "dash": (ShellKind.SH, ".sh", "."),
    "sh": (ShellKind.SH, ".sh", "."),
    "tcsh": (ShellKind.CSH, ".csh", "source"),
    "csh": (ShellKind.CSH, ".csh", "source"),
    "bash": (ShellKind.BASH, ".bash", "source"),
}
_FALLBACK = _SHELL_TABLE["bash"]


def is_windows(platform: str | None = None) -> bool:
    return (platform or sys.platform) == "win32"


def _shell_name(shell_path: str) -> str:
    """Return the final path segment of a SHELL value."""
    return shell_path.rstrip("/").split("/")[-1] or "bash"


def detect_user_shell(
    platform: str | None = None, environ: Mapping[str, str] | None = None
) -> ShellInfo:
    """Return the descriptor for the user's shell.

    Windows always gets ``cmd``. Elsewhere ``$SHELL`` (default ``/bin/bash``)
    is classified by basename; unknown shells are treated as bash.
    """
    if is_windows(platform):
        return CMD_SHELL

    env = os.environ if environ is None else environ
    shell_path = env.get("SHELL") or DEFAULT_SHELL
    kind, extension, source = _SHELL_TABLE.get(_shell_name(shell_path), _FALLBACK)
    return ShellInfo(
        name=kind,
        executable=shell_path,
        script_extension=extension,
        source_command=source,
    )


def get_setup_script_extension() -> str:
    """Return the setup script extension for the detected shell."""
    return detect_user_shell().script_extension
