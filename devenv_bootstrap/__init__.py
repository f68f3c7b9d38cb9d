"""devenv-bootstrap: provision a development environment from a Nix bundle.

Core design goals:
- Linear, stage-by-stage workflow driven by operator prompts
- Idempotent remediation (re-running never duplicates configuration)
- Backup before overwrite; atomic writes for every file we touch
- Centralized logging
"""

__all__ = []
