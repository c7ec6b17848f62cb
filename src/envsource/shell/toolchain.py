"""Discovery of Windows toolchain and auxiliary environment activators."""

import logging
import os
import shutil
import subprocess
from collections.abc import Callable, Mapping

from envsource import config
from envsource.shell.detection import is_windows

log = logging.getLogger(__name__)


def _query_installation_roots(emit: Callable[[str], None]) -> list[str]:
    """Ask vswhere for every Visual Studio installation root."""
    try:
        result = subprocess.run(
            [config.VSWHERE_PATH, "-all", "-property", "installationPath"],
            capture_output=True,
            text=True,
            timeout=config.DISCOVERY_TIMEOUT_SECONDS,
            check=True,
        )
    except (subprocess.SubprocessError, OSError) as e:
        emit(f"Toolchain discovery failed, continuing without it: {e}")
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def find_toolchain_installations(
    platform: str | None = None, on_output: Callable[[str], None] | None = None
) -> list[str]:
    """Return existing vcvarsall.bat paths, deduplicated in discovery order."""
    if not is_windows(platform):
        return []

    def emit(message: str) -> None:
        log.debug("%s", message)
        if on_output is not None:
            on_output(message)

    installations: list[str] = []
    seen: set[str] = set()
    for root in _query_installation_roots(emit):
        vcvars = os.path.join(root, config.VCVARSALL_RELATIVE_PATH)
        if vcvars in seen or not os.path.isfile(vcvars):
            continue
        seen.add(vcvars)
        installations.append(vcvars)
    emit(f"Found {len(installations)} toolchain installation(s)")
    return installations


def _search_path(env: Mapping[str, str] | None) -> str | None:
    """Return PATH from env, matching the key case-insensitively as cmd does."""
    if env is None:
        return None
    for key, value in env.items():
        if key.upper() == "PATH":
            return value
    return None


def locate_aux_activator(aux_root: str, env: Mapping[str, str] | None = None) -> str | None:
    """Return the auxiliary environment activator when it can be used."""
    if not os.path.isdir(aux_root):
        log.debug("aux root does not exist: %s", aux_root)
        return None
    activator = shutil.which(config.AUX_ACTIVATOR, path=_search_path(env))
    if activator is None:
        log.debug("%s not found on PATH", config.AUX_ACTIVATOR)
    return activator
