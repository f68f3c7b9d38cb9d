from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence

from ..errors import CommandFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class Runner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        cwd: Optional[str] = None,
        capture: bool = True,
        timeout_s: Optional[float] = None,
    ) -> CmdResult:
        ...


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def _ignore(_signum, _frame):
    pass


def _shield_sigint() -> bool:
    """Let an interactive child own Ctrl-C; returns False off the main thread.

    A no-op handler is installed rather than SIG_IGN so the child does not
    inherit an ignored SIGINT across exec.
    """

    if threading.current_thread() is not threading.main_thread():
        return False
    signal.signal(signal.SIGINT, _ignore)
    return True


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    cwd: Optional[str] = None,
    capture: bool = True,
    timeout_s: Optional[float] = None,
    env: Mapping[str, str] | None = None,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False inherits the terminal, for interactive tools such as
      `nix develop`. Ctrl-C then belongs to the child; the parent only
      raises KeyboardInterrupt if the child died of SIGINT.
    - A timeout or a non-zero exit with check=True raises CommandFailed.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    previous_sigint = signal.getsignal(signal.SIGINT)
    shielded = not capture and _shield_sigint()
    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
            timeout=timeout_s,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandFailed(argv_list, 124, f"timed out after {timeout_s}s") from e
    except FileNotFoundError as e:
        raise CommandFailed(argv_list, 127, str(e)) from e
    finally:
        if shielded:
            signal.signal(signal.SIGINT, previous_sigint or signal.default_int_handler)

    if not capture and p.returncode in (-signal.SIGINT, 128 + signal.SIGINT):
        # The child itself was interrupted; pass that on to the caller.
        raise KeyboardInterrupt

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandFailed(argv_list, p.returncode, stderr.strip())

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
