from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from ..errors import PrerequisiteMissing
from ..lib.fs import atomic_write_text, read_text
from ..lib.textedit import ensure_directive, has_directive
from ..logging_utils import success
from ..pipeline import ProvisionCtx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrerequisiteCheck:
    name: str
    kind: str  # "hard" | "soft"
    present: bool


def check_nix(ctx: ProvisionCtx) -> PrerequisiteCheck:
    return PrerequisiteCheck("nix", "hard", ctx.have("nix"))


def check_flakes(ctx: ProvisionCtx) -> PrerequisiteCheck:
    conf = ctx.env.expand(ctx.cfg.nix_conf_path)
    if has_directive(read_text(conf) or "", ctx.cfg.flake_directive):
        return PrerequisiteCheck("flakes", "soft", True)
    r = ctx.runner(
        ["nix", "flake", "--help"],
        check=False,
        timeout_s=ctx.cfg.command_timeout_s,
    )
    return PrerequisiteCheck("flakes", "soft", r.returncode == 0)


def enable_flakes(ctx: ProvisionCtx) -> bool:
    """Add the flakes directive to nix.conf unless it is already there."""

    conf = ctx.env.expand(ctx.cfg.nix_conf_path)
    new, changed = ensure_directive(read_text(conf) or "", ctx.cfg.flake_directive)
    if changed:
        atomic_write_text(conf, new)
    return changed


class CheckPrerequisitesStep:
    step_id = "10_check_prerequisites"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Checking for Nix...")
        nix = check_nix(ctx)
        if not nix.present:
            hint = ctx.cfg.nix_install_hint
            logger.error("Nix is not installed. Please install Nix first:")
            if hint:
                logger.error("  %s", hint)
            raise PrerequisiteMissing("nix", remediation=hint or None)
        success(logger, "Nix is installed")

        logger.info("Checking for Nix flakes...")
        flakes = check_flakes(ctx)
        if flakes.present:
            success(logger, "Nix flakes are available")
        else:
            logger.warning("Nix flakes are not enabled. Enabling experimental features...")
            changed = enable_flakes(ctx)
            conf = ctx.env.expand(ctx.cfg.nix_conf_path)
            if changed:
                success(logger, "Nix flakes enabled in %s", conf)
            else:
                success(logger, "Flakes directive already present in %s", conf)

        state["prerequisites"] = {"nix": nix.present, "flakes": flakes.present}
        return state
