"""
Engine configuration.

Settings live in a ``pulsestore.toml`` file with a ``[pulsestore]`` table.
Every setting has a default, so a missing file simply yields the defaults.
``PULSESTORE_DATA_DIR`` overrides the data directory.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "pulsestore.toml"
CONFIG_TABLE = "pulsestore"
DATA_DIR_ENV = "PULSESTORE_DATA_DIR"


def default_data_dir() -> Path:
    """Resolve the data directory, respecting PULSESTORE_DATA_DIR."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".pulsestore"


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration."""
    data_dir: Path = field(default_factory=default_data_dir)
    blob_dir_name: str = "PulseCRM"
    metadata_dir_name: str = "metadata"

    # Metadata store keys
    documents_key: str = "pulse_documents"
    custom_fields_key: str = "pulse_document_custom_fields"
    contacts_key: str = "pulse_contacts"

    # Derived assets
    thumbnail_max_dimension: int = 200
    thumbnail_quality: int = 70
    profile_image_max_dimension: int = 300
    profile_image_quality: int = 70

    # Platform key-value stores cap values near 4 MiB; warn well before that.
    metadata_soft_limit_bytes: int = 3 * 1024 * 1024

    recent_days: int = 7
    seed_default_custom_fields: bool = True

    @property
    def blob_dir(self) -> Path:
        """Directory holding externalized document payloads."""
        return self.data_dir / self.blob_dir_name

    @property
    def metadata_dir(self) -> Path:
        """Directory backing the file key-value store."""
        return self.data_dir / self.metadata_dir_name


def _coerce_setting(name: str, value: Any, expected: Any) -> Any:
    """Validate one TOML value against the dataclass field's default type."""
    if isinstance(expected, Path):
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a path string")
        return Path(value).expanduser()
    if isinstance(expected, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a boolean")
        return value
    if isinstance(expected, int):
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError(f"{name} must be a positive integer")
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")
    return value


def load_config(path: Path | None = None) -> EngineConfig:
    """
    Load configuration from a TOML file.

    Args:
        path: Config file. Defaults to ``<data dir>/pulsestore.toml``.

    Returns:
        EngineConfig with file values applied over defaults and the
        PULSESTORE_DATA_DIR override applied last.

    Raises:
        ValueError: On unknown keys or values of the wrong type.
    """
    config = EngineConfig()
    config_path = path if path is not None else config.data_dir / CONFIG_FILENAME
    if not config_path.exists():
        return config

    with open(config_path, "rb") as f:
        raw = tomllib.load(f)

    table = raw.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ValueError(f"[{CONFIG_TABLE}] must be a table")

    defaults = {f.name: getattr(config, f.name) for f in fields(EngineConfig)}
    unknown = sorted(set(table) - set(defaults))
    if unknown:
        raise ValueError(f"Unknown settings in {config_path}: {', '.join(unknown)}")

    updates = {name: _coerce_setting(name, value, defaults[name]) for name, value in table.items()}
    if os.environ.get(DATA_DIR_ENV):
        updates["data_dir"] = default_data_dir()
    return replace(config, **updates)
