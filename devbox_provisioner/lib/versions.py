"""Version selector handling for the language version managers.

A selector is either a concrete version ("3.12.4", "20.11.1"), the sentinel
"latest", or "<prefix>:latest" (pyenv style, e.g. "3:latest").
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

from ..errors import VersionResolutionError

LATEST = "latest"

_FINAL_RELEASE_RE = re.compile(r"^\d+(\.\d+)*$")


def is_latest(selector: str) -> bool:
    s = selector.strip()
    return s == LATEST or s.endswith(":" + LATEST)


def latest_prefix(selector: str) -> str:
    """Prefix part of "<prefix>:latest"; "" for a bare "latest"."""
    s = selector.strip()
    if s == LATEST:
        return ""
    return s[: -len(":" + LATEST)]


def version_key(version: str) -> Tuple[int, ...]:
    return tuple(int(p) for p in version.split("."))


def pick_latest(candidates: Iterable[str], prefix: str = "") -> Optional[str]:
    """Highest final release (digits and dots only) matching prefix.

    A prefix matches whole components: "3.1" matches 3.1.4 but not 3.12.0.
    """

    best: Optional[str] = None
    for raw in candidates:
        v = raw.strip()
        if not _FINAL_RELEASE_RE.match(v):
            continue
        if prefix and not (v == prefix or v.startswith(prefix + ".")):
            continue
        if best is None or version_key(v) > version_key(best):
            best = v
    return best


def ensure_concrete(selector: str, resolved: Optional[str]) -> str:
    value = (resolved or "").strip()
    if not value or is_latest(value):
        raise VersionResolutionError(f"Could not resolve version selector {selector!r}")
    return value
