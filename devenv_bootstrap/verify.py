from __future__ import annotations

import argparse
import logging
import shutil
from typing import Callable, Dict, List, Optional

from .errors import FatalError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging, success
from .settings import load_config

logger = logging.getLogger(__name__)


def missing_tools(
    tools: Dict[str, str], which: Optional[Callable[[str], Optional[str]]] = None
) -> List[str]:
    """Check each tool on PATH and log the outcome; returns the missing ones."""

    which = which or shutil.which
    missing: List[str] = []
    for cmd, label in tools.items():
        if which(cmd):
            success(logger, "%s: Available", label)
        else:
            logger.error("%s: Not found", label)
            missing.append(cmd)
    return missing


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="devenv-verify",
        description="Check that the environment's critical tools are on PATH.",
    )
    p.add_argument("--config", default=None)
    p.add_argument("--log", default=DEFAULT_LOG_PATH)
    args = p.parse_args(argv)

    configure_logging(log_path=args.log)
    try:
        cfg = load_config(args.config)
    except FatalError as e:
        logger.error("%s", e)
        return e.exit_code

    missing = missing_tools(cfg.verify_tools)
    if missing:
        logger.error("Some tools are missing: %s", ", ".join(missing))
        return 1
    success(logger, "All tools available")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
