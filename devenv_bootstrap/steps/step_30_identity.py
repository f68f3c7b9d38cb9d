from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..errors import CommandFailed
from ..lib.fs import atomic_write_text, read_text
from ..lib.textedit import escape_nix_string, substitute_placeholders
from ..logging_utils import success
from ..pipeline import ProvisionCtx, warn

logger = logging.getLogger(__name__)


def personalize_artifact(path: Path, replacements: Dict[str, str]) -> Dict[str, int]:
    """Rewrite placeholder tokens in one file; returns hits per token.

    A token that is not found leaves the file as it was. The file is only
    written when at least one token matched.
    """

    content = read_text(path)
    if content is None:
        raise FileNotFoundError(str(path))

    content, hits = substitute_placeholders(
        content, {token: escape_nix_string(value) for token, value in replacements.items()}
    )

    if any(hits.values()):
        atomic_write_text(path, content)
    return hits


class IdentityStep:
    step_id = "30_identity"

    def apply_argv(self, ctx: ProvisionCtx) -> List[str]:
        target = ctx.cfg.home_manager_target
        if ctx.have("home-manager"):
            return ["home-manager", "switch", "--flake", target]
        return ["nix", "run", ctx.cfg.home_manager_bootstrap_ref, "--", "switch", "--flake", target]

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if not ctx.prompter.confirm("Do you want to install Home Manager configuration?"):
            logger.info("Skipping Home Manager configuration")
            return state

        name = ctx.prompter.text("Enter your Git username")
        email = ctx.prompter.text("Enter your Git email")
        replacements = {ctx.cfg.name_token: name, ctx.cfg.email_token: email}

        changed: List[str] = []
        for rel in ctx.cfg.identity_artifacts:
            path = ctx.bundle_dir / rel
            logger.info("Personalizing %s", path)
            try:
                hits = personalize_artifact(path, replacements)
            except FileNotFoundError:
                logger.warning("%s not found; skipping", path)
                warn(state, self.step_id, f"missing_artifact:{rel}")
                continue

            missing = [t for t, n in hits.items() if n == 0]
            for token in missing:
                logger.warning("Placeholder %r not found in %s; left unchanged", token, path)
                warn(state, self.step_id, f"placeholder_absent:{rel}:{token}")
            if len(missing) < len(hits):
                changed.append(rel)
        state["identity"] = {"changed": changed}

        if not ctx.have("home-manager"):
            logger.warning("Home Manager not found; bootstrapping it with nix run")
        logger.warning("Applying Home Manager configuration...")
        try:
            ctx.runner(
                self.apply_argv(ctx),
                cwd=str(ctx.bundle_dir),
                capture=False,
                timeout_s=ctx.cfg.command_timeout_s,
            )
        except CommandFailed as e:
            # Substitutions above stay in place; the operator can re-apply by hand.
            logger.error("Home Manager apply failed: %s", e)
            warn(state, self.step_id, f"apply_failed:{e.returncode}")
            state["identity"]["applied"] = False
            return state

        state["identity"]["applied"] = True
        success(logger, "Home Manager configuration applied")
        return state
