"""Shell descriptor model."""

from dataclasses import dataclass
from enum import Enum


class ShellKind(str, Enum):
    """Shell dialects envsource knows how to drive."""

    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    SH = "sh"
    CSH = "csh"
    CMD = "cmd"


@dataclass(frozen=True)
class ShellInfo:
    """How to source a script in a detected shell."""

    name: ShellKind
    executable: str
    script_extension: str
    source_command: str

    def to_dict(self) -> dict[str, str]:
        """Return the descriptor as plain strings, e.g. for JSON output."""
        return {
            "name": self.name.value,
            "executable": self.executable,
            "script_extension": self.script_extension,
            "source_command": self.source_command,
        }
