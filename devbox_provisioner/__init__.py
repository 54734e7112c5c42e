"""devbox-provisioner: bootstrap a Linux (WSL) development environment.

Core design goals:
- One fixed, ordered list of steps
- Idempotent steps (is_needed / apply / verify)
- Fail fast, never roll back
- Configuration resolved once, passed explicitly
- Centralized logging
"""

__all__ = []
