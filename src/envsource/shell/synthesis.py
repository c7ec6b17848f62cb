"""Build the command that sources a setup file and dumps the environment."""

import logging
import shlex
from collections.abc import Callable, Mapping

from envsource import config
from envsource.models import ExecutionPlan, ShellInfo, ShellKind
from envsource.shell.detection import is_windows
from envsource.shell.hooks import (
    render_setup_script,
    temp_script_path,
    unique_stamp,
    write_setup_script,
)
from envsource.shell.toolchain import locate_aux_activator

log = logging.getLogger(__name__)


def _posix_command(target_file: str, shell_info: ShellInfo) -> str:
    source = f"{shell_info.source_command} {shlex.quote(target_file)}"
    if shell_info.name is ShellKind.FISH:
        return shlex.join([shell_info.executable, "-c", f"{source}; and env"])
    if shell_info.name is ShellKind.CSH:
        return shlex.join([shell_info.executable, "-c", f"{source} && env"])
    # Login shell so profile-level variables (PATH extensions etc.) are
    # present even when we were not started from one, e.g. in containers.
    return shlex.join([shell_info.executable, "--login", "-c", f"{source} && env"])


def _fallback_windows_command(target_file: str) -> str:
    return f'cmd /c "call "{target_file}" && set"'


def _windows_plan(
    target_file: str,
    aux_root: str,
    toolchain_paths: list[str],
    env: Mapping[str, str] | None,
    emit: Callable[[str], None],
) -> ExecutionPlan:
    stamp = unique_stamp()
    script_path = temp_script_path(config.SETUP_SCRIPT_PREFIX, stamp)
    hook_path = temp_script_path(config.AUX_HOOK_PREFIX, stamp)

    activator = locate_aux_activator(aux_root, env)
    if activator is None:
        emit(f"Skipping {config.AUX_ACTIVATOR} environment: not available under {aux_root}")
    else:
        emit(f"Setting up {config.AUX_ACTIVATOR} environment from {aux_root}")

    content = render_setup_script(target_file, toolchain_paths, aux_root, activator, hook_path)
    try:
        write_setup_script(content, script_path)
    except (OSError, UnicodeError) as e:
        emit(f"Failed to create temporary batch file: {e}")
        return ExecutionPlan(kind=ShellKind.CMD, command=_fallback_windows_command(target_file))

    emit(f"Created temporary batch file: {script_path}")
    return ExecutionPlan(
        kind=ShellKind.CMD,
        command=f'cmd /c "{script_path}"',
        cleanup_paths=[script_path, hook_path],
    )


def build_setup_command(
    target_file: str,
    shell_info: ShellInfo,
    platform: str | None,
    aux_root: str,
    toolchain_paths: list[str],
    *,
    env: Mapping[str, str] | None = None,
    on_output: Callable[[str], None] | None = None,
) -> ExecutionPlan:
    """Return the plan that sources target_file and prints the resulting env.

    On Windows this writes a temporary batch script chaining toolchain and
    auxiliary environment activation; the script and its nested hook file are
    listed in the plan's cleanup_paths.
    """

    def emit(message: str) -> None:
        log.debug("%s", message)
        if on_output is not None:
            on_output(message)

    if is_windows(platform):
        return _windows_plan(target_file, aux_root, toolchain_paths, env, emit)

    command = _posix_command(target_file, shell_info)
    emit(f"Sourcing Environment using {shell_info.name.value}: {command}")
    return ExecutionPlan(kind=shell_info.name, command=command)
