from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import ConfigError


def _manifest_dir() -> Path:
    # devenv_bootstrap/lib/manifests.py -> devenv_bootstrap/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_manifest(name: str) -> Dict[str, Any]:
    """Load a packaged manifest (manifests/<name>.yaml)."""
    return load_yaml(_manifest_dir() / f"{name}.yaml")
