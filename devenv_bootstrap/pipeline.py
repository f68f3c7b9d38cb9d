from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .lib.command import Runner, run_cmd
from .lib.env import HostEnv
from .lib.fs import BackupLedger
from .profiles import Profile
from .prompts import Prompter
from .settings import ProvisionerConfig
from .shell_config import ShellConfig

logger = logging.getLogger(__name__)


@dataclass
class ProvisionCtx:
    """Everything a stage may touch, passed in so tests can replace it."""

    cfg: ProvisionerConfig
    env: HostEnv
    prompter: Prompter
    profiles: List[Profile]
    shell: ShellConfig
    runner: Runner = run_cmd
    which: Callable[[str], Optional[str]] = shutil.which
    ledger: BackupLedger = field(default_factory=BackupLedger)

    @property
    def bundle_dir(self) -> Path:
        p = self.env.expand(self.cfg.bundle_dir)
        return p if p.is_absolute() else (self.env.cwd / p).resolve()

    def have(self, tool: str) -> bool:
        return self.which(tool) is not None


class Step(Protocol):
    """A single stage of the provisioning workflow."""

    step_id: str

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]


def warn(state: Dict[str, Any], step_id: str, reason: str) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append(
        {"step": step_id, "reason": reason}
    )


def run_pipeline(
    *,
    ctx: ProvisionCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
) -> PipelineResult:
    """Run stages strictly in order.

    A stage that raises stops the run; nothing already done is rolled back.
    """

    ran: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)
        state = step.run(ctx, state)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
