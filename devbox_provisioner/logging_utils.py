from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

FALLBACK_LOG_NAME = "devbox-provisioner.log"

_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)


def _open_log_file(log_path: str) -> tuple[logging.Handler, str]:
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: Optional[str],
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Attach the provisioning log handlers to the root logger.

    Every command and step decision goes to ``log_path`` (by default
    ``~/.local/state/devbox-provisioner/provision.log``) and, unless disabled,
    to stderr. When that directory cannot be created the log lands in
    ``./devbox-provisioner.log`` instead. ``log_path=None`` skips the file
    entirely, which is what a refused root invocation uses.

    Safe to call more than once; only the first call installs handlers.
    Returns the file actually written to, or None for console-only logging.
    """

    root = logging.getLogger()
    root.setLevel(level)
    if getattr(root, "_devbox_configured", False):
        return getattr(root, "_devbox_log_path", log_path)

    chosen: Optional[str] = None
    if log_path is not None:
        handler, chosen = _open_log_file(log_path)
        handler.setFormatter(_FORMAT)
        root.addHandler(handler)
    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(_FORMAT)
        root.addHandler(console)

    setattr(root, "_devbox_configured", True)
    setattr(root, "_devbox_log_path", chosen)

    if chosen is not None and chosen != log_path:
        logging.getLogger(__name__).warning("Cannot write %s; logging to %s", log_path, chosen)
    else:
        logging.getLogger(__name__).debug("Logging to %s", chosen or "console only")
    return chosen
