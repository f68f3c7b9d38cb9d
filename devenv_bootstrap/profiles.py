from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import ConfigError, InvalidSelection
from .lib.manifests import load_manifest


@dataclass(frozen=True)
class Profile:
    profile_id: str
    label: str
    flake_ref: str

    @property
    def invocation(self) -> List[str]:
        if self.flake_ref in ("", "."):
            return ["nix", "develop"]
        return ["nix", "develop", self.flake_ref]

    def marker_line(self, bundle_dir: Path, cwd: Path) -> str:
        """The `.envrc` line that makes direnv load this profile from cwd."""
        ref = self.flake_ref or "."
        if Path(bundle_dir).resolve() == Path(cwd).resolve():
            return "use flake" if ref == "." else f"use flake {ref}"

        bundle = Path(bundle_dir).resolve()
        if ref == ".":
            return f"use flake {bundle}"
        if ref.startswith(".#"):
            return f"use flake {bundle}{ref[1:]}"
        return f"use flake {(bundle / ref).resolve()}"


def load_profiles() -> List[Profile]:
    data = load_manifest("profiles")
    out: List[Profile] = []
    for item in data.get("profiles") or []:
        try:
            out.append(Profile(str(item["id"]), str(item["label"]), str(item.get("flake_ref") or ".")))
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Malformed profile entry: {item!r}") from e
    if not out:
        raise ConfigError("No installation profiles defined")
    return out


def resolve_choice(profiles: Sequence[Profile], answer: str) -> Profile:
    """Map a menu answer (1-based index or profile id) to a Profile."""

    choice = answer.strip()
    found: Optional[Profile] = None
    if choice.isdigit() and 1 <= int(choice) <= len(profiles):
        found = profiles[int(choice) - 1]
    else:
        found = next((p for p in profiles if p.profile_id == choice.lower()), None)
    if found is None:
        raise InvalidSelection(choice, [str(i) for i in range(1, len(profiles) + 1)])
    return found
