"""Shared fixtures: a throwaway HOME, bundle and working directory per test."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

from devenv_bootstrap.errors import CommandFailed
from devenv_bootstrap.lib.command import CmdResult
from devenv_bootstrap.lib.env import HostEnv
from devenv_bootstrap.lib.fs import BackupLedger
from devenv_bootstrap.lib.manifests import load_manifest
from devenv_bootstrap.pipeline import ProvisionCtx
from devenv_bootstrap.profiles import load_profiles
from devenv_bootstrap.prompts import Prompter
from devenv_bootstrap.settings import ProvisionerConfig, deep_merge
from devenv_bootstrap.shell_config import load_shell_config

FLAKES = "experimental-features = nix-command flakes"

HOME_NIX = """{ config, pkgs, ... }:
{
  programs.git = {
    enable = true;
    userName = "Your Name";  # Change this
    userEmail = "your.email@example.com";  # Change this
  };
}
"""


class FakeRunner:
    """Records every command; exit codes are looked up by argv prefix."""

    def __init__(self, returncodes: Optional[Dict[tuple, int]] = None):
        self.returncodes = returncodes or {}
        self.calls: List[dict] = []

    def __call__(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        cwd: Optional[str] = None,
        capture: bool = True,
        timeout_s: Optional[float] = None,
    ) -> CmdResult:
        argv = list(argv)
        self.calls.append({"argv": argv, "cwd": cwd, "capture": capture, "timeout_s": timeout_s})
        rc = 0
        for prefix, code in self.returncodes.items():
            if tuple(argv[: len(prefix)]) == prefix:
                rc = code
        if check and rc != 0:
            raise CommandFailed(argv, rc, "simulated failure")
        return CmdResult(argv=argv, returncode=rc, stdout="", stderr="")

    @property
    def argvs(self) -> List[List[str]]:
        return [c["argv"] for c in self.calls]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    p = tmp_path / "home"
    p.mkdir()
    return p


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    p = tmp_path / "work"
    p.mkdir()
    return p


@pytest.fixture
def bundle(tmp_path: Path) -> Path:
    p = tmp_path / "bundle"
    (p / "config").mkdir(parents=True)
    (p / "home.nix").write_text(HOME_NIX, encoding="utf-8")
    (p / "config" / "bashrc").write_text("NEWCONTENT", encoding="utf-8")
    (p / "config" / "vimrc").write_text("set number\n", encoding="utf-8")
    return p


@pytest.fixture
def nix_conf(home: Path) -> Path:
    return home / ".config" / "nix" / "nix.conf"


@pytest.fixture
def flakes_enabled(nix_conf: Path) -> Path:
    nix_conf.parent.mkdir(parents=True)
    nix_conf.write_text(FLAKES + "\n", encoding="utf-8")
    return nix_conf


@pytest.fixture
def make_ctx(home: Path, workdir: Path, bundle: Path):
    def _make(
        answers: Iterable[str] = (),
        *,
        tools: Iterable[str] = ("nix",),
        runner: Optional[FakeRunner] = None,
        overrides: Optional[dict] = None,
        output: Optional[List[str]] = None,
    ) -> ProvisionCtx:
        raw = deep_merge(load_manifest("defaults"), {"bundle_dir": str(bundle)})
        raw = deep_merge(raw, {"identity": {"artifacts": ["home.nix"]}})
        if overrides:
            raw = deep_merge(raw, overrides)
        cfg = ProvisionerConfig(raw=raw)
        present = set(tools)
        out = output if output is not None else []
        return ProvisionCtx(
            cfg=cfg,
            env=HostEnv(home=home, user="alice", cwd=workdir),
            prompter=Prompter.scripted(answers, write=out.append),
            profiles=load_profiles(),
            shell=load_shell_config(),
            runner=runner if runner is not None else FakeRunner(),
            which=lambda name: f"/usr/bin/{name}" if name in present else None,
            ledger=BackupLedger(cfg.backup_suffix),
        )

    return _make
