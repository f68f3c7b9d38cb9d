"""Shell environment as an explicit, versioned object.

Aliases and exported variables are named fields here instead of ambient
shell state. The same object renders the bundled ~/.bashrc and feeds the
end-of-run summary.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .errors import ConfigError
from .lib.manifests import load_manifest

_HOOKS = {
    "zoxide": [
        "if command -v zoxide >/dev/null 2>&1; then",
        '  eval "$(zoxide init bash)"',
        "  alias z='zoxide'",
        "  alias zi='zoxide query -i'",
        "fi",
    ],
    "direnv": [
        "if command -v direnv >/dev/null 2>&1; then",
        '  eval "$(direnv hook bash)"',
        "fi",
    ],
}


@dataclass(frozen=True)
class Alias:
    name: str
    command: str
    description: str = ""


@dataclass(frozen=True)
class AliasGroup:
    title: str
    aliases: Tuple[Alias, ...]


@dataclass(frozen=True)
class ShellConfig:
    version: int
    env: Dict[str, str] = field(default_factory=dict)
    groups: Tuple[AliasGroup, ...] = ()
    hooks: Tuple[str, ...] = ()

    def aliases(self) -> List[Alias]:
        return [a for g in self.groups for a in g.aliases]

    def render_bashrc(self) -> str:
        lines = [
            f"# Generated by devenv-bootstrap (shell config v{self.version})",
            "",
            "# Environment",
        ]
        for key, value in self.env.items():
            # Double quotes so $HOME and friends still expand.
            lines.append(f'export {key}="{value}"')
        for group in self.groups:
            lines += ["", f"# {group.title}"]
            for a in group.aliases:
                lines.append(f"alias {a.name}={shlex.quote(a.command)}")
        for hook in self.hooks:
            lines += ["", f"# {hook}"] + _HOOKS[hook]
        lines += [
            "",
            "mkcd() {",
            '  mkdir -p "$1" && cd "$1"',
            "}",
            "",
            "shopt -s histappend",
        ]
        return "\n".join(lines) + "\n"


def load_shell_config() -> ShellConfig:
    data = load_manifest("shell")
    try:
        groups = tuple(
            AliasGroup(
                title=str(g["title"]),
                aliases=tuple(
                    Alias(str(a["name"]), str(a["command"]), str(a.get("description") or ""))
                    for a in g.get("aliases") or []
                ),
            )
            for g in data.get("groups") or []
        )
        version = int(data.get("version", 1))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed shell config: {e}") from e

    hooks = tuple(str(h) for h in data.get("hooks") or [])
    unknown = [h for h in hooks if h not in _HOOKS]
    if unknown:
        raise ConfigError(f"Unknown shell hooks: {', '.join(unknown)}")

    env = {str(k): str(v) for k, v in (data.get("env") or {}).items()}
    return ShellConfig(version=version, env=env, groups=groups, hooks=hooks)
