"""Check whether the system Python is externally managed (PEP 668)."""

import logging
import os
import subprocess
from collections.abc import Mapping

log = logging.getLogger(__name__)

MARKER_NAME = "EXTERNALLY-MANAGED"
STDLIB_QUERY = "import sysconfig; print(sysconfig.get_path('stdlib'))"


def get_stdlib_path(env: Mapping[str, str] | None = None) -> str | None:
    """Return python3's stdlib directory as seen with env."""
    try:
        result = subprocess.run(
            ["python3", "-c", STDLIB_QUERY],
            capture_output=True,
            text=True,
            timeout=10,
            env=dict(env) if env is not None else None,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        log.debug("stdlib query failed: %s", e)
        return None
    if result.returncode != 0:
        log.debug("stdlib query returned rc=%d", result.returncode)
        return None
    return result.stdout.strip() or None


def check_externally_managed_environment(env: Mapping[str, str] | None = None) -> bool:
    """Return whether pip installs into python3 are blocked by PEP 668."""
    stdlib = get_stdlib_path(env)
    if stdlib is None:
        return False
    # Debian/Ubuntu put the marker in the stdlib dir, e.g. /usr/lib/python3.12.
    candidates = [
        os.path.join(stdlib, MARKER_NAME),
        os.path.join(os.path.dirname(stdlib), MARKER_NAME),
    ]
    return any(os.path.exists(path) for path in candidates)
