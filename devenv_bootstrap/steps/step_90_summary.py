from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..pipeline import ProvisionCtx
from ..profiles import Profile
from ..shell_config import ShellConfig

logger = logging.getLogger(__name__)

RULE = "=" * 40


def render_summary(profiles: List[Profile], shell: ShellConfig) -> List[str]:
    lines = [RULE, "Installation Complete!", RULE, "", "Your development environment is ready!", ""]

    lines.append("Quick start commands:")
    commands = [(" ".join(p.invocation), p.label) for p in profiles]
    width = max(len(cmd) for cmd, _ in commands)
    for cmd, label in commands:
        lines.append(f"  {cmd:<{width}}  # {label}")

    lines += ["", "Shell aliases:"]
    for group in shell.groups:
        lines.append(f"  {group.title}:")
        for a in group.aliases:
            note = f" ({a.description})" if a.description else ""
            lines.append(f"    {a.name:<10} -> {a.command}{note}")

    lines += [
        "",
        "To update tools later:",
        "  nix flake update                      # update package versions",
        "  home-manager switch --flake .#default # apply updates",
    ]
    return lines


class SummaryStep:
    step_id = "90_summary"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        for line in render_summary(ctx.profiles, ctx.shell):
            ctx.prompter.say(line)
        return state
