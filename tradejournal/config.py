"""Configuration for Trade Journal.

Settings live in ``~/.config/tradejournal/config.toml``. ``TRADEJOURNAL_HOME``
moves the whole directory and ``TRADEJOURNAL_DB`` points at another database.

Example config.toml::

    [storage]
    db_path = "~/journal/trades.db"

    [import]
    default_broker = "interactive_brokers"
    max_bytes = 5242880

    [logging]
    level = "INFO"
    file = "~/.config/tradejournal/tradejournal.log"
"""

import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field

from tradejournal.errors import ConfigError
from tradejournal.importers.pipeline import (
    ERROR_DETAIL_LIMIT,
    MAX_IMPORT_BYTES,
    REJECTION_SAMPLE_LIMIT,
)


def get_home() -> Path:
    """Directory holding config.toml and the default database."""
    override = os.environ.get("TRADEJOURNAL_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "tradejournal"


class JournalConfig(BaseModel):
    """Resolved application settings."""

    db_path: Path = Field(..., description="SQLite database file")
    default_broker: str = Field(default="generic", description="Default broker profile")
    max_import_bytes: int = Field(default=MAX_IMPORT_BYTES, gt=0, description="Upload limit")
    error_detail_limit: int = Field(
        default=ERROR_DETAIL_LIMIT, ge=0, description="Rejected rows shown after an import"
    )
    rejection_sample_limit: int = Field(
        default=REJECTION_SAMPLE_LIMIT, ge=0, description="Rejected rows shown on a failed import"
    )
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Rotating log file")

    model_config = {"frozen": True}


def _load_raw(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        return toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e


def load_config(config_path: Optional[Path] = None) -> JournalConfig:
    """Load configuration, falling back to defaults for anything unset.

    Args:
        config_path: Explicit config file. Defaults to config.toml in the
            Trade Journal home directory.

    Raises:
        ConfigError: If the file exists but is not valid TOML or holds
            invalid values.
    """
    home = get_home()
    raw = _load_raw(config_path or home / "config.toml")

    storage = raw.get("storage", {})
    importing = raw.get("import", {})
    logging_section = raw.get("logging", {})

    db_path = os.environ.get("TRADEJOURNAL_DB") or storage.get("db_path")
    log_file = logging_section.get("file")

    try:
        return JournalConfig(
            db_path=Path(db_path).expanduser() if db_path else home / "tradejournal.db",
            default_broker=importing.get("default_broker", "generic"),
            max_import_bytes=importing.get("max_bytes", MAX_IMPORT_BYTES),
            error_detail_limit=importing.get("error_detail_limit", ERROR_DETAIL_LIMIT),
            rejection_sample_limit=importing.get(
                "rejection_sample_limit", REJECTION_SAMPLE_LIMIT
            ),
            log_level=str(logging_section.get("level", "WARNING")).upper(),
            log_file=Path(log_file).expanduser() if log_file else None,
        )
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
