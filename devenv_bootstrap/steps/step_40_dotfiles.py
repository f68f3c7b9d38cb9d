from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..lib.fs import atomic_write
from ..logging_utils import success
from ..pipeline import ProvisionCtx, warn
from ..settings import DotfileSpec

logger = logging.getLogger(__name__)


def bundled_content(ctx: ProvisionCtx, spec: DotfileSpec) -> Optional[bytes]:
    src = ctx.bundle_dir / spec.source
    if src.is_file():
        return src.read_bytes()
    if spec.render == "shell_config":
        return ctx.shell.render_bashrc().encode("utf-8")
    return None


def install_dotfile(ctx: ProvisionCtx, dest: Path, data: bytes) -> Optional[Path]:
    """Back up dest (if present), then replace it. Returns the backup path.

    BackupError propagates before dest is touched.
    """

    backup = ctx.ledger.backup(dest)
    atomic_write(dest, data)
    return backup


class DotfilesStep:
    step_id = "40_dotfiles"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if not ctx.prompter.confirm("Do you want to copy shell configuration files?"):
            logger.info("Skipping shell configuration files")
            return state

        installed: List[str] = []
        for spec in ctx.cfg.dotfiles:
            dest = ctx.env.expand(spec.dest)
            data = bundled_content(ctx, spec)
            if data is None:
                logger.warning("Bundled %s not found at %s; skipping", spec.name, ctx.bundle_dir / spec.source)
                warn(state, self.step_id, f"missing_source:{spec.name}")
                continue

            if dest.is_file() and dest.read_bytes() == data:
                logger.info("%s is already up to date", dest)
                continue

            logger.info("Installing %s -> %s", spec.name, dest)
            install_dotfile(ctx, dest, data)
            installed.append(str(dest))

        state["dotfiles"] = {
            "installed": installed,
            "backups": {str(k): str(v) for k, v in ctx.ledger.backups.items()},
        }
        if installed:
            success(logger, "Shell configuration files copied")
            logger.warning("Please restart your shell or run: source ~/.bashrc")
        return state
