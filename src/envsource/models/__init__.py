"""Model package for envsource."""

from envsource.models.execution_plan import ExecutionPlan
from envsource.models.shell_info import ShellInfo, ShellKind
from envsource.models.source_options import DEFAULT_AUX_ROOT, SourceSetupOptions

__all__ = [
    "DEFAULT_AUX_ROOT",
    "ExecutionPlan",
    "ShellInfo",
    "ShellKind",
    "SourceSetupOptions",
]
