from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import CommandFailed
from ..lib.fs import atomic_write_text, read_text
from ..logging_utils import success
from ..pipeline import ProvisionCtx, warn
from ..profiles import Profile

logger = logging.getLogger(__name__)


class AutoActivationStep:
    step_id = "50_auto_activation"

    def selected_profile(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Profile:
        wanted = state.get("profile")
        return next((p for p in ctx.profiles if p.profile_id == wanted), ctx.profiles[0])

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        tool = ctx.cfg.activation_tool
        if not ctx.prompter.confirm(
            f"Do you want to create a {ctx.cfg.marker_name} file for automatic environment loading?"
        ):
            logger.info("Skipping %s setup", tool)
            return state

        profile = self.selected_profile(ctx, state)
        marker = ctx.env.cwd / ctx.cfg.marker_name
        content = profile.marker_line(ctx.bundle_dir, ctx.env.cwd) + "\n"

        if read_text(marker) == content:
            logger.info("%s already loads the %s profile", marker, profile.profile_id)
        else:
            ctx.ledger.backup(marker)
            atomic_write_text(marker, content)
            logger.info("Wrote %s (%s)", marker, content.strip())
        state["activation"] = {"marker": str(marker), "allowed": False}

        if not ctx.have(tool):
            logger.warning(
                "%s not found in PATH. Install it to enable automatic environment loading.", tool
            )
            warn(state, self.step_id, f"{tool}_missing")
            return state

        try:
            ctx.runner([tool, "allow"], cwd=str(ctx.env.cwd), timeout_s=ctx.cfg.command_timeout_s)
        except CommandFailed as e:
            logger.warning("%s allow failed: %s", tool, e)
            warn(state, self.step_id, f"{tool}_allow_failed")
            return state

        state["activation"]["allowed"] = True
        success(logger, "%s configured - environment will load automatically", tool)
        return state
