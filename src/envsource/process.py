"""Run a setup plan in a child shell and capture the resulting environment."""

import asyncio
import locale
import logging
import os
import signal
import subprocess
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

from envsource import config
from envsource.config import load_options
from envsource.models import ExecutionPlan, SourceSetupOptions
from envsource.parser import parse_env_dump
from envsource.shell.detection import detect_user_shell
from envsource.shell.synthesis import build_setup_command
from envsource.shell.toolchain import find_toolchain_installations

log = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024
_KILL_WAIT_SECONDS = 5.0


class SourceSetupError(RuntimeError):
    """Sourcing a setup file failed in the child shell."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.timed_out = timed_out


class _OutputLimitExceeded(Exception):
    pass


def _safe_sink(on_output: Callable[[str], None] | None) -> Callable[[str], None]:
    """Wrap a caller's sink so it can never affect control flow."""

    def sink(message: str) -> None:
        if on_output is None:
            return
        try:
            on_output(message)
        except Exception:
            log.warning("output sink raised, ignoring", exc_info=True)

    return sink


def _emitter(on_output: Callable[[str], None] | None) -> Callable[[str], None]:
    """Return a sink that also logs every message."""
    sink = _safe_sink(on_output)

    def emit(message: str) -> None:
        log.debug("%s", message)
        sink(message)

    return emit


@contextmanager
def plan_artifacts(plan: ExecutionPlan, emit: Callable[[str], None]) -> Iterator[ExecutionPlan]:
    """Remove the plan's temp files once the block exits, however it exits."""
    try:
        yield plan
    finally:
        for path in plan.cleanup_paths:
            if not os.path.exists(path):
                continue
            try:
                os.unlink(path)
            except OSError as e:
                emit(f"Failed to clean up temporary file {path}: {e}")
            else:
                emit(f"Cleaned up temporary file: {path}")


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        # cmd's `set` writes in the console code page.
        return data.decode(locale.getpreferredencoding(False), errors="replace")


async def _read_bounded(stream: asyncio.StreamReader, limit: int, name: str) -> bytes:
    buffer = bytearray()
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            return bytes(buffer)
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise _OutputLimitExceeded(f"{name} exceeded {limit} bytes")


def _spawn_options() -> dict:
    """Put the shell in its own process group so it can be killed as a tree."""
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


async def _kill_process_tree(proc: asyncio.subprocess.Process) -> None:
    """Kill the shell and everything the setup script started."""
    if os.name == "nt":
        try:
            killer = await asyncio.create_subprocess_exec(
                "taskkill",
                "/PID",
                str(proc.pid),
                "/T",
                "/F",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await asyncio.wait_for(killer.wait(), timeout=_KILL_WAIT_SECONDS)
        except (OSError, TimeoutError) as e:
            log.debug("taskkill failed: %s", e)
    else:
        # start_new_session makes the shell's pid its process group id.
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
    try:
        await asyncio.wait_for(proc.wait(), timeout=_KILL_WAIT_SECONDS)
    except TimeoutError:
        log.warning("shell pid %d did not exit after kill", proc.pid)


async def _run(
    command: str,
    env: Mapping[str, str],
    cwd: str,
    timeout: float,
    max_output_bytes: int,
) -> tuple[int, bytes, bytes]:
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
        env=dict(env),
        **_spawn_options(),
    )
    tasks = [
        asyncio.create_task(_read_bounded(proc.stdout, max_output_bytes, "stdout")),
        asyncio.create_task(_read_bounded(proc.stderr, max_output_bytes, "stderr")),
        asyncio.create_task(proc.wait()),
    ]
    try:
        stdout, stderr, returncode = await asyncio.wait_for(
            asyncio.gather(*tasks), timeout=timeout
        )
    except (TimeoutError, _OutputLimitExceeded):
        await _kill_process_tree(proc)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return returncode, stdout, stderr


async def execute_plan(
    plan: ExecutionPlan,
    env: Mapping[str, str],
    cwd: str,
    on_output: Callable[[str], None] | None = None,
    *,
    timeout: float = config.EXECUTION_TIMEOUT_SECONDS,
    max_output_bytes: int = config.MAX_OUTPUT_BYTES,
) -> dict[str, str]:
    """Run plan.command and return the environment it prints.

    Raises SourceSetupError on spawn failure, non-zero exit, timeout, or
    when either output stream exceeds max_output_bytes. The plan's temp
    files are removed before this returns or raises.
    """
    emit = _emitter(on_output)

    with plan_artifacts(plan, emit):
        try:
            returncode, stdout_bytes, stderr_bytes = await _run(
                plan.command, env, cwd, timeout, max_output_bytes
            )
        except TimeoutError:
            message = f"Command timed out after {timeout} seconds: {plan.command}"
            emit(f"Shell sourcing error: {message}")
            raise SourceSetupError(message, timed_out=True) from None
        except _OutputLimitExceeded as e:
            message = f"Command output too large ({e}): {plan.command}"
            emit(f"Shell sourcing error: {message}")
            raise SourceSetupError(message) from None
        except OSError as e:
            message = f"Failed to start shell: {e}"
            emit(f"Shell sourcing error: {message}")
            raise SourceSetupError(message) from e

    stdout = _decode(stdout_bytes)
    stderr = _decode(stderr_bytes)

    if returncode != 0:
        message = f"Command failed with exit code {returncode}: {plan.command}"
        emit(f"Shell sourcing error: {message}")
        if stderr:
            emit(f"Shell stderr: {stderr}")
            message = f"{message}\n{stderr.rstrip()}"
        raise SourceSetupError(message, returncode=returncode, stderr=stderr)

    if stderr:
        emit(f"Shell stderr: {stderr}")
    if stdout:
        emit(f"Shell stdout: {stdout}")

    parsed = parse_env_dump(stdout)
    emit(f"Successfully parsed {len(parsed)} environment variables")
    return parsed


async def source_setup_file(
    filename: str,
    env: Mapping[str, str] | None = None,
    options: SourceSetupOptions | None = None,
) -> dict[str, str]:
    """Source filename in the user's shell and return the resulting environment."""
    options = options or load_options()
    emit = _emitter(options.on_output)
    base_env = dict(os.environ) if env is None else dict(env)

    shell_info = detect_user_shell()
    emit(f"Detected shell: {shell_info.name.value} ({shell_info.executable})")
    toolchain_paths = await asyncio.to_thread(
        find_toolchain_installations, None, _safe_sink(options.on_output)
    )

    plan = build_setup_command(
        filename,
        shell_info,
        None,
        options.aux_root,
        toolchain_paths,
        env=base_env,
        on_output=_safe_sink(options.on_output),
    )
    return await execute_plan(plan, base_env, options.resolved_cwd(), options.on_output)


def source_setup_file_sync(
    filename: str,
    env: Mapping[str, str] | None = None,
    options: SourceSetupOptions | None = None,
) -> dict[str, str]:
    """Blocking wrapper around source_setup_file."""
    return asyncio.run(source_setup_file(filename, env, options))
