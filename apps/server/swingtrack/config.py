from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from swingtrack_core.constants import CYCLE_DEBOUNCE_MS, CYCLE_THRESHOLD, FREQUENCY_WINDOW_MS

from .history_store import HISTORY_RECORDS_KEY
from .kv_store import VALID_BACKENDS

SERVER_DIR = Path(__file__).resolve().parents[1]
"""Root of the ``apps/server/`` package tree."""

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8000},
    "detection": {
        "threshold": CYCLE_THRESHOLD,
        "debounce_ms": CYCLE_DEBOUNCE_MS,
        "window_ms": FREQUENCY_WINDOW_MS,
    },
    "recording": {"tick_interval_s": None},
    "sensors": {"heart_rate_enabled": True},
    "storage": {
        "backend": "sqlite",
        "path": "data/history.db",
        "history_key": HISTORY_RECORDS_KEY,
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_config_path(path_text: str, config_path: Path) -> Path:
    path = Path(path_text)
    if path.is_absolute():
        return path
    return config_path.resolve().parent / path


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            raise ValueError(f"ServerConfig.port must be 1-65535, got {self.port!r}")


@dataclass(slots=True)
class DetectionConfig:
    threshold: float
    debounce_ms: int
    window_ms: int

    def __post_init__(self) -> None:
        if not self.threshold > 0:
            LOGGER.warning(
                "detection.threshold=%s is not positive; using default %s",
                self.threshold,
                CYCLE_THRESHOLD,
            )
            object.__setattr__(self, "threshold", CYCLE_THRESHOLD)
        if self.debounce_ms < 0:
            LOGGER.warning("detection.debounce_ms=%s is negative; clamped to 0", self.debounce_ms)
            object.__setattr__(self, "debounce_ms", 0)
        if self.window_ms < 1:
            LOGGER.warning("detection.window_ms=%s is below 1; clamped to 1", self.window_ms)
            object.__setattr__(self, "window_ms", 1)


@dataclass(slots=True)
class RecordingConfig:
    tick_interval_s: float


@dataclass(slots=True)
class SensorsConfig:
    heart_rate_enabled: bool


@dataclass(slots=True)
class StorageConfig:
    backend: str
    path: Path | None
    history_key: str

    def __post_init__(self) -> None:
        if self.backend not in VALID_BACKENDS:
            raise ValueError(
                f"storage.backend must be one of {VALID_BACKENDS}, got {self.backend!r}"
            )
        if not self.history_key:
            raise ValueError("storage.history_key must not be empty")


@dataclass(slots=True)
class AppConfig:
    server: ServerConfig
    detection: DetectionConfig
    recording: RecordingConfig
    sensors: SensorsConfig
    storage: StorageConfig
    config_path: Path


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML object at the top level.")
        return data


def _tick_interval_s(raw: Any, window_ms: int) -> float:
    """The tick defaults to one frequency window; junk falls back to that too."""
    default = window_ms / 1000.0
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        LOGGER.warning("recording.tick_interval_s=%r is not a number; using %s", raw, default)
        return default
    if value <= 0:
        LOGGER.warning("recording.tick_interval_s=%s is not positive; using %s", value, default)
        return default
    return value


def documented_default_config() -> dict[str, Any]:
    """Return runtime defaults in the shape documented by config.example.yaml."""
    defaults = deepcopy(DEFAULT_CONFIG)
    defaults["recording"]["tick_interval_s"] = FREQUENCY_WINDOW_MS / 1000.0
    return defaults


def load_config(config_path: Path | None = None) -> AppConfig:
    path = config_path or (SERVER_DIR / "config.yaml")
    path = path.resolve()
    override = _read_config_file(path)
    merged = _deep_merge(DEFAULT_CONFIG, override)

    detection = DetectionConfig(
        threshold=float(merged["detection"]["threshold"]),
        debounce_ms=int(merged["detection"]["debounce_ms"]),
        window_ms=int(merged["detection"]["window_ms"]),
    )  # NOTE: DetectionConfig.__post_init__ clamps out-of-range tunables

    storage_cfg = merged["storage"]
    backend = str(storage_cfg.get("backend") or "sqlite").strip().lower()
    storage_path_raw = storage_cfg.get("path")
    storage_path = (
        _resolve_config_path(str(storage_path_raw), path)
        if isinstance(storage_path_raw, str) and storage_path_raw.strip()
        else None
    )
    if backend != "memory" and storage_path is None:
        raise ValueError(f"storage.path must be configured for the {backend!r} backend.")

    app_config = AppConfig(
        server=ServerConfig(
            host=str(merged["server"]["host"]),
            port=int(merged["server"]["port"]),
        ),
        detection=detection,
        recording=RecordingConfig(
            tick_interval_s=_tick_interval_s(
                merged["recording"].get("tick_interval_s"), detection.window_ms
            ),
        ),
        sensors=SensorsConfig(
            heart_rate_enabled=bool(merged["sensors"].get("heart_rate_enabled", True)),
        ),
        storage=StorageConfig(
            backend=backend,
            path=storage_path,
            history_key=str(storage_cfg.get("history_key") or HISTORY_RECORDS_KEY),
        ),
        config_path=path,
    )
    LOGGER.info(
        "Loaded config=%s storage=%s:%s",
        app_config.config_path,
        app_config.storage.backend,
        app_config.storage.path,
    )
    return app_config
