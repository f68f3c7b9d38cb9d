from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.command import fmt_argv
from ..logging_utils import success
from ..pipeline import ProvisionCtx
from ..profiles import Profile, resolve_choice
from ..prompts import Question

logger = logging.getLogger(__name__)


class SelectProfileStep:
    step_id = "20_select_profile"

    def choose(self, ctx: ProvisionCtx) -> Profile:
        ctx.prompter.say("Choose installation type:")
        for i, p in enumerate(ctx.profiles, start=1):
            ctx.prompter.say(f"{i}) {p.label}")
        q = Question(
            text=f"Enter choice (1-{len(ctx.profiles)}): ",
            validate=lambda answer: resolve_choice(ctx.profiles, answer),
            retry=False,
        )
        return ctx.prompter.ask(q)

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        # An unknown answer raises InvalidSelection before anything runs.
        profile = self.choose(ctx)
        state["profile"] = profile.profile_id
        logger.info("Installing %s (%s)", profile.label, fmt_argv(profile.invocation))

        # Non-zero exit raises CommandFailed and ends the run here.
        ctx.runner(
            profile.invocation,
            cwd=str(ctx.bundle_dir),
            capture=False,
            timeout_s=ctx.cfg.command_timeout_s,
        )
        success(logger, "Environment %s is ready", profile.profile_id)
        return state
