"""Configuration for envsource."""

import os

from envsource.models import DEFAULT_AUX_ROOT, SourceSetupOptions

AUX_ROOT_ENV_VAR = "ENVSOURCE_AUX_ROOT"

# Child shell limits.
EXECUTION_TIMEOUT_SECONDS = 60.0
MAX_OUTPUT_BYTES = 1024 * 1024

# vswhere ships with every Visual Studio installer since 2017.
VSWHERE_PATH = os.path.join(
    os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)"),
    "Microsoft Visual Studio",
    "Installer",
    "vswhere.exe",
)
DISCOVERY_TIMEOUT_SECONDS = 5
VCVARSALL_RELATIVE_PATH = os.path.join("VC", "Auxiliary", "Build", "vcvarsall.bat")
TOOLCHAIN_ARCH = "x64"

AUX_ACTIVATOR = "pixi"
AUX_HOOK_ARGS = ("shell-hook",)

SETUP_SCRIPT_PREFIX = "envsource_setup_"
AUX_HOOK_PREFIX = "envsource_aux_"


def get_aux_root() -> str:
    """Return the auxiliary environment root from env or default."""
    return os.environ.get(AUX_ROOT_ENV_VAR, "").strip() or DEFAULT_AUX_ROOT


def load_options(**overrides) -> SourceSetupOptions:
    """Build SourceSetupOptions from keyword overrides and the environment."""
    values = {key: value for key, value in overrides.items() if value is not None}
    values.setdefault("aux_root", get_aux_root())
    return SourceSetupOptions(**values)
