"""Options model for sourcing a setup file."""

import os
from collections.abc import Callable

from pydantic import BaseModel

DEFAULT_AUX_ROOT = "c:\\pixi_ws"


class SourceSetupOptions(BaseModel):
    """Runtime options for sourcing a setup file."""

    cwd: str | None = None
    on_output: Callable[[str], None] | None = None
    aux_root: str = DEFAULT_AUX_ROOT

    def resolved_cwd(self) -> str:
        """Return the working directory, defaulting to the current one."""
        return self.cwd or os.getcwd()
