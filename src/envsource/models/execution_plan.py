"""Execution plan model for the child shell."""

from dataclasses import dataclass, field

from envsource.models.shell_info import ShellKind


@dataclass
class ExecutionPlan:
    """A command line to run through the platform shell, plus the temp files it owns."""

    kind: ShellKind
    command: str
    cleanup_paths: list[str] = field(default_factory=list)
