from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from config.app_metadata import COUNTRIES_URL, PLATES_URL

REPO_ROOT = Path(__file__).resolve().parents[1]
SECRETS_PATH = REPO_ROOT / "config" / "secrets.env"

LOGGING = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, "").strip() or default


def _float_env(name: str, default: float) -> float:
    value = _get_env(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    csv_path: Path
    list_where: str
    display_tz: str
    frame_interval_s: float
    countries_url: str
    plates_url: str
    layer_timeout_s: float
    log_level: str


def load_settings() -> Settings:
    load_dotenv(dotenv_path=SECRETS_PATH)
    csv_path = Path(_get_env("QUAKE_CSV_PATH", "data/eq_image.csv"))
    if not csv_path.is_absolute():
        csv_path = REPO_ROOT / csv_path
    frame_interval_s = _float_env("QUAKE_FRAME_INTERVAL_S", 0.1)
    if frame_interval_s <= 0:
        raise ValueError("QUAKE_FRAME_INTERVAL_S must be positive.")
    return Settings(
        csv_path=csv_path,
        list_where=_get_env("QUAKE_LIST_WHERE", "mag > 7"),
        display_tz=_get_env("QUAKE_DISPLAY_TZ"),
        frame_interval_s=frame_interval_s,
        countries_url=_get_env("QUAKE_COUNTRIES_URL", COUNTRIES_URL),
        plates_url=_get_env("QUAKE_PLATES_URL", PLATES_URL),
        layer_timeout_s=_float_env("QUAKE_LAYER_TIMEOUT_S", 20.0),
        log_level=_get_env("QUAKE_LOG_LEVEL", LOGGING["level"]).upper(),
    )


def configure_logging(level: str = LOGGING["level"]) -> None:
    logging.basicConfig(level=level, format=LOGGING["format"])
