from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

STATE_VERSION = 1


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    fmt = _detect_format(p)
    data: Any
    if fmt in {"yaml", "yml"}:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def _serialize(path: Path, state: Dict[str, Any]) -> str:
    if _detect_format(path) in {"yaml", "yml"}:
        return yaml.safe_dump(state, sort_keys=False)
    return json.dumps(state, indent=2, sort_keys=True) + "\n"


def save_state(path: str, state: Dict[str, Any]) -> None:
    """Write state atomically: temp file in the same directory, then rename."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    content = _serialize(p, state)

    fd, tmp_path = tempfile.mkstemp(dir=str(p.parent), prefix=".state_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, p)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding existing values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("tools", {})
    state.setdefault("execution", {})

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def record_tool(
    state: Dict[str, Any],
    name: str,
    *,
    installed_version: Optional[str] = None,
    fragment_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Upsert the record for one installed tool; unset fields keep prior values."""

    tools = state.setdefault("tools", {})
    entry = tools.setdefault(name, {"name": name, "installed_version": None, "fragment_path": None})
    if installed_version is not None:
        entry["installed_version"] = installed_version
    if fragment_path is not None:
        entry["fragment_path"] = str(fragment_path)
    return entry


def get_tool(state: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    return (state.get("tools") or {}).get(name)
