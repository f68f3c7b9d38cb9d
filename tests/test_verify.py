"""
Tests for the tool verification command.
"""

import logging

from devenv_bootstrap import verify
from devenv_bootstrap.verify import missing_tools


def test_reports_missing_tools(caplog):
    caplog.set_level(logging.INFO)
    present = {"git", "jq"}
    missing = missing_tools(
        {"git": "Git", "jq": "jq", "rg": "ripgrep"},
        which=lambda name: f"/bin/{name}" if name in present else None,
    )
    assert missing == ["rg"]
    assert "ripgrep: Not found" in caplog.text
    assert "Git: Available" in caplog.text


def test_main_exit_codes(tmp_path, monkeypatch):
    monkeypatch.setattr(verify, "configure_logging", lambda **_kw: str(tmp_path / "x.log"))

    monkeypatch.setattr(verify.shutil, "which", lambda name: "/bin/" + name)
    assert verify.main([]) == 0

    monkeypatch.setattr(verify.shutil, "which", lambda name: None)
    assert verify.main([]) == 1
