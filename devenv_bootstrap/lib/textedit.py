"""Pure text transforms used by the provisioning stages.

Nothing here touches the filesystem, so each function can be tested on
plain strings.
"""

from __future__ import annotations

import re
from typing import Dict, Mapping, Tuple


def has_directive(content: str, directive: str) -> bool:
    want = directive.strip()
    return any(line.strip() == want for line in content.splitlines())


def ensure_directive(content: str, directive: str) -> Tuple[str, bool]:
    """Return (new_content, changed); the directive is appended only if absent."""

    if has_directive(content, directive):
        return content, False
    prefix = content
    if prefix and not prefix.endswith("\n"):
        prefix += "\n"
    return f"{prefix}{directive.strip()}\n", True


def escape_nix_string(value: str) -> str:
    """Escape a value for use inside a Nix double-quoted string."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")


def substitute_placeholders(content: str, replacements: Mapping[str, str]) -> Tuple[str, Dict[str, int]]:
    """Replace every placeholder token in one pass; returns (new_content, hits per token).

    Text produced by one replacement is never matched again, so a value may
    contain another token verbatim. Longer tokens win where two overlap.
    """

    if any(not token for token in replacements):
        raise ValueError("placeholder token must not be empty")
    hits = {token: 0 for token in replacements}
    if not replacements:
        return content, hits
    pattern = re.compile("|".join(re.escape(t) for t in sorted(replacements, key=len, reverse=True)))

    def _sub(m: "re.Match[str]") -> str:
        hits[m.group(0)] += 1
        return replacements[m.group(0)]

    return pattern.sub(_sub, content), hits
