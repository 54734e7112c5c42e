from __future__ import annotations

import configparser
import logging
from typing import Dict

from ..lib.files import read_text, write_privileged_file
from .base import BaseStep

logger = logging.getLogger(__name__)


# section -> key -> value
HOST_CONFIG: Dict[str, Dict[str, str]] = {
    "boot": {"systemd": "true"},
}


def render_host_config(settings: Dict[str, Dict[str, str]]) -> str:
    lines: list[str] = []
    for section, values in settings.items():
        if lines:
            lines.append("")
        lines.append(f"[{section}]")
        lines.extend(f"{k} = {v}" for k, v in values.items())
    return "\n".join(lines) + "\n"


def unapplied_settings(text: str, settings: Dict[str, Dict[str, str]]) -> list[str]:
    """Desired `section.key` entries that an existing file does not carry."""

    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(text)
    except configparser.Error:
        return [f"{s}.{k}" for s, values in settings.items() for k in values]

    missing: list[str] = []
    for section, values in settings.items():
        for key, value in values.items():
            current = parser.get(section, key, fallback=None)
            if current is None or current.strip().lower() != value.lower():
                missing.append(f"{section}.{key}")
    return missing


class HostConfigStep(BaseStep):
    """Create the WSL host config once; an existing file is never edited."""

    step_id = "10_host_config"

    def is_needed(self, ctx) -> bool:
        path = ctx.config.host_config_path
        if not path.exists():
            return True

        # Existence implies correctness; only report what did not apply.
        try:
            text = read_text(path)
        except OSError as e:
            logger.warning("%s exists and is left untouched; could not read it to compare: %s", str(path), e)
            return False
        missing = unapplied_settings(text, HOST_CONFIG)
        if missing:
            logger.warning(
                "%s exists and is left untouched; settings not applied: %s",
                str(path),
                ", ".join(missing),
            )
        return False

    def apply(self, ctx) -> None:
        path = ctx.config.host_config_path
        logger.info("Creating %s", str(path))
        write_privileged_file(ctx.runner, path, render_host_config(HOST_CONFIG))
