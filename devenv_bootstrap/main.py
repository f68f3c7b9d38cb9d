from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

from .errors import FatalError, FilesystemError
from .lib.env import HostEnv
from .lib.fs import BackupLedger
from .logging_utils import DEFAULT_LOG_PATH, configure_logging, success
from .pipeline import ProvisionCtx, run_pipeline
from .profiles import load_profiles
from .prompts import Prompter
from .settings import load_config
from .shell_config import load_shell_config
from .steps import (
    AutoActivationStep,
    CheckPrerequisitesStep,
    DotfilesStep,
    IdentityStep,
    SelectProfileStep,
    SummaryStep,
)

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def build_steps():
    return [
        CheckPrerequisitesStep(),
        SelectProfileStep(),
        IdentityStep(),
        DotfilesStep(),
        AutoActivationStep(),
        SummaryStep(),
    ]


def build_ctx(
    *,
    config_path: Optional[str] = None,
    env: Optional[HostEnv] = None,
    prompter: Optional[Prompter] = None,
    **overrides: Any,
) -> ProvisionCtx:
    cfg = load_config(config_path)
    return ProvisionCtx(
        cfg=cfg,
        env=env or HostEnv.from_environ(),
        prompter=prompter or Prompter(),
        profiles=load_profiles(),
        shell=load_shell_config(),
        ledger=BackupLedger(cfg.backup_suffix),
        **overrides,
    )


def _run_steps(ctx: ProvisionCtx, state: Dict[str, Any]):
    try:
        return run_pipeline(ctx=ctx, state=state, steps=build_steps())
    except (OSError, UnicodeDecodeError) as e:
        raise FilesystemError(f"Filesystem error: {e}") from e


def run(ctx: ProvisionCtx) -> Dict[str, Any]:
    """Run the provisioning workflow; fatal errors propagate."""

    state: Dict[str, Any] = {"execution": {"warnings": []}}
    logger.info("Development Environment Installer")
    logger.info("Bundle: %s (user=%s, home=%s)", ctx.bundle_dir, ctx.env.user or "?", ctx.env.home)

    try:
        result = _run_steps(ctx, state)
    except FatalError as e:
        logger.debug("Provisioning aborted at %s", state["execution"].get("current_step"), exc_info=True)
        state["execution"]["error"] = {"step": state["execution"].get("current_step"), "error": str(e)}
        raise

    state = result.state
    state["execution"]["ran_steps"] = result.ran_steps
    return state


def execute(ctx: ProvisionCtx) -> int:
    """Run the workflow and map the outcome to a process exit code."""

    try:
        run(ctx)
    except FatalError as e:
        logger.error("%s", e)
        if e.remediation:
            logger.error("Remediation: %s", e.remediation)
        return e.exit_code
    except (KeyboardInterrupt, EOFError):
        logger.error("Interrupted; files already written are complete, nothing is half-written")
        return EXIT_INTERRUPTED

    success(logger, "Setup complete! Restart your shell or source ~/.bashrc to use the new tools.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="devenv-bootstrap",
        description="Interactively provision the development environment from this bundle.",
    )
    p.add_argument("--config", default=None, help="YAML file merged over the built-in defaults")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the provisioning log")
    args = p.parse_args(argv)

    configure_logging(log_path=args.log)
    try:
        ctx = build_ctx(config_path=args.config)
    except FatalError as e:
        logger.error("%s", e)
        return e.exit_code
    return execute(ctx)


if __name__ == "__main__":
    raise SystemExit(main())
