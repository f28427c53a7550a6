"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.repeat import parse_repeat

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / "cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"
DATA_DIR = CADENCE_HOME / "data"


@dataclass
class Config:
    """Cadence configuration."""

    tasks_file: str = field(default_factory=lambda: str(DATA_DIR / "tasks.json"))
    default_repeat: str = "once"
    show_completed: bool = False
    preview_count: int = 5


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from unquoted values."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from cadence.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "tasks_file":
                config.tasks_file = str(Path(value).expanduser())
            case "default_repeat":
                if parse_repeat(value) is None:
                    logger.warning(f"Ignoring invalid DEFAULT_REPEAT: {value!r}")
                else:
                    config.default_repeat = value
            case "show_completed":
                config.show_completed = value.lower() in ("1", "true", "yes", "on")
            case "preview_count":
                try:
                    config.preview_count = max(1, int(value))
                except ValueError:
                    logger.warning(f"Ignoring invalid PREVIEW_COUNT: {value!r}")
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config
