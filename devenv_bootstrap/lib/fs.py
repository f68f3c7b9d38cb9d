from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..errors import BackupError

logger = logging.getLogger(__name__)


def read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def _temp_beside(path: Path) -> Path:
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    os.close(fd)
    return Path(tmp)


def _existing_mode(path: Path) -> int:
    """Mode to keep for path; a symlink (e.g. into the read-only Nix store) is
    replaced by a plain file, so its target's mode does not carry over."""

    try:
        st = path.lstat()
    except FileNotFoundError:
        return 0o644
    if stat.S_ISLNK(st.st_mode):
        return 0o644
    return st.st_mode & 0o777


def atomic_write(path: Path, data: bytes, mode: Optional[int] = None) -> None:
    """Write data to a temp file next to path, then rename it into place.

    An interrupted run leaves either the old file or the new one, never a
    half-written destination.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    if mode is None:
        mode = _existing_mode(path)
    tmp = _temp_beside(path)
    try:
        with open(tmp, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write(path, text.encode("utf-8"))


def copy_file(src: Path, dst: Path) -> None:
    shutil.copy2(src, dst)


class BackupLedger:
    """Tracks the backups taken during one run.

    A destination is backed up at most once per run. An existing backup from
    an earlier run is never overwritten; the next free `<suffix>.N` is used.
    """

    def __init__(self, suffix: str = ".backup"):
        self.suffix = suffix
        self.backups: Dict[Path, Path] = {}

    def backup_path_for(self, target: Path) -> Path:
        candidate = target.with_name(target.name + self.suffix)
        n = 1
        while candidate.exists():
            candidate = target.with_name(f"{target.name}{self.suffix}.{n}")
            n += 1
        return candidate

    def backup(self, target: Path) -> Optional[Path]:
        """Copy target to its backup path and verify the copy.

        Returns None if target does not exist. Raises BackupError when the
        copy cannot be made or does not match the original.
        """

        target = Path(target)
        if target in self.backups:
            return self.backups[target]
        if not target.exists():
            return None

        backup = self.backup_path_for(target)
        tmp: Optional[Path] = None
        try:
            tmp = _temp_beside(backup)
            copy_file(target, tmp)
            if tmp.read_bytes() != target.read_bytes():
                raise BackupError(f"Backup of {target} does not match the original")
            os.replace(tmp, backup)
        except OSError as e:
            raise BackupError(f"Could not back up {target}: {e}") from e
        finally:
            if tmp is not None:
                tmp.unlink(missing_ok=True)

        self.backups[target] = backup
        logger.warning("Backed up existing %s to %s", target, backup)
        return backup
