from __future__ import annotations

from typing import Optional, Sequence


class ProvisionError(RuntimeError):
    pass


class FatalError(ProvisionError):
    """Aborts the workflow. main() maps it to a non-zero exit code."""

    exit_code = 1

    def __init__(self, message: str, *, remediation: Optional[str] = None):
        super().__init__(message)
        self.remediation = remediation


class ConfigError(FatalError):
    pass


class PrerequisiteMissing(FatalError):
    def __init__(self, tool: str, *, remediation: Optional[str] = None):
        super().__init__(f"{tool} is not installed", remediation=remediation)
        self.tool = tool


class InvalidSelection(FatalError):
    def __init__(self, answer: str, choices: Sequence[str]):
        super().__init__(
            f"Invalid choice {answer!r} (expected one of: {', '.join(choices)})"
        )
        self.answer = answer


class CommandFailed(FatalError):
    def __init__(self, argv: Sequence[str], returncode: int, detail: str = ""):
        msg = f"Command failed ({returncode}): {' '.join(argv)}"
        if detail:
            msg = f"{msg}\n{detail}"
        super().__init__(msg)
        self.argv = list(argv)
        self.returncode = returncode

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode if 0 < self.returncode < 256 else 1


class BackupError(FatalError):
    pass


class FilesystemError(FatalError):
    """A read or write of a provisioned file failed (permissions, bad path, encoding)."""

    def __init__(self, message: str, *, remediation: Optional[str] = None):
        super().__init__(
            message,
            remediation=remediation
            or "Check that the parent directory exists and is writable by the current user, then re-run.",
        )
