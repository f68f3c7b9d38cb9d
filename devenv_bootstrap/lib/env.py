from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


@dataclass(frozen=True)
class HostEnv:
    """Operator environment, read once at start and never mutated."""

    home: Path
    user: str
    cwd: Path

    @classmethod
    def from_environ(
        cls, environ: Optional[Mapping[str, str]] = None, cwd: Optional[Path] = None
    ) -> "HostEnv":
        environ = os.environ if environ is None else environ
        home = environ.get("HOME") or str(Path.home())
        user = environ.get("USER") or environ.get("LOGNAME") or ""
        return cls(home=Path(home), user=user, cwd=(cwd or Path.cwd()).resolve())

    def expand(self, path: str) -> Path:
        """Expand a leading ~ against this HOME rather than the process one."""
        if path == "~":
            return self.home
        if path.startswith("~/"):
            return self.home / path[2:]
        return Path(path)
