from __future__ import annotations

import copy
import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigError
from .lib.manifests import load_manifest, load_yaml


@dataclass(frozen=True)
class DotfileSpec:
    name: str
    source: str
    dest: str
    render: Optional[str] = None


_MISSING = object()


@functools.lru_cache(maxsize=None)
def _packaged_defaults() -> Dict[str, Any]:
    return load_manifest("defaults")


def _lookup(data: Any, keys: tuple) -> Any:
    for key in keys:
        if not isinstance(data, Mapping) or key not in data:
            return _MISSING
        data = data[key]
    return data


@dataclass(frozen=True)
class ProvisionerConfig:
    """Typed view over the merged config mapping.

    Keys absent from raw fall back to the packaged defaults.yaml, which is
    the only place a default value is written down.
    """

    raw: Dict[str, Any]

    def _get(self, *keys: str) -> Any:
        value = _lookup(self.raw, keys)
        if value is _MISSING:
            value = _lookup(_packaged_defaults(), keys)
        return None if value is _MISSING else value

    @property
    def bundle_dir(self) -> str:
        return str(self._get("bundle_dir"))

    @property
    def command_timeout_s(self) -> Optional[float]:
        v = self._get("command_timeout_s")
        return None if v is None else float(v)

    @property
    def nix_install_hint(self) -> str:
        return str(self._get("nix", "install_hint") or "")

    @property
    def nix_conf_path(self) -> str:
        return str(self._get("nix", "conf_path"))

    @property
    def flake_directive(self) -> str:
        return str(self._get("nix", "flake_directive"))

    @property
    def home_manager_target(self) -> str:
        return str(self._get("home_manager", "flake_target"))

    @property
    def home_manager_bootstrap_ref(self) -> str:
        return str(self._get("home_manager", "bootstrap_ref"))

    @property
    def name_token(self) -> str:
        return str(self._get("identity", "name_token"))

    @property
    def email_token(self) -> str:
        return str(self._get("identity", "email_token"))

    @property
    def identity_artifacts(self) -> List[str]:
        return [str(a) for a in self._get("identity", "artifacts") or []]

    @property
    def backup_suffix(self) -> str:
        return str(self._get("dotfiles", "backup_suffix"))

    @property
    def dotfiles(self) -> List[DotfileSpec]:
        out: List[DotfileSpec] = []
        for item in self._get("dotfiles", "files") or []:
            if not isinstance(item, dict) or not item.get("source") or not item.get("dest"):
                raise ConfigError(f"dotfile entry needs source and dest: {item!r}")
            out.append(
                DotfileSpec(
                    name=str(item.get("name") or Path(str(item["source"])).name),
                    source=str(item["source"]),
                    dest=str(item["dest"]),
                    render=item.get("render"),
                )
            )
        return out

    @property
    def marker_name(self) -> str:
        return str(self._get("activation", "marker"))

    @property
    def activation_tool(self) -> str:
        return str(self._get("activation", "tool"))

    @property
    def verify_tools(self) -> Dict[str, str]:
        tools = self._get("verify", "tools") or {}
        return {str(k): str(v) for k, v in tools.items()}


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base; nested mappings merge, other values replace."""
    out = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def load_config(path: Optional[str] = None) -> ProvisionerConfig:
    raw = load_manifest("defaults")
    if path:
        p = Path(path).expanduser()
        if not p.exists():
            raise ConfigError(f"Config file not found: {p}")
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError("config must be YAML")
        raw = deep_merge(raw, load_yaml(p))
    return ProvisionerConfig(raw=raw)
