from __future__ import annotations

import json
import os
from pathlib import Path

from doubles.db.database import get_app_data_dir, get_default_database_path

DEFAULT_ALLOWED_COURTS = (
    "Lala",
    "AR",
    "Mochomos",
    "Combugas",
    "Casa del Vino",
    "Moric",
    "Central",
)
DEFAULT_SETS_PER_MATCH = 3
DEFAULT_PAIRING_MODE = "ranked"


def _get_app_settings_path() -> Path:
    return get_app_data_dir() / "settings.json"


def _read_settings() -> dict[str, object]:
    path = _get_app_settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def _write_settings(data: dict[str, object]) -> None:
    path = _get_app_settings_path()
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def get_db_path() -> str:
    env_path = os.environ.get("DOUBLES_DB_PATH")
    if env_path:
        return env_path
    return str(_read_settings().get("db_path") or get_default_database_path())


def get_allowed_court_names() -> tuple[str, ...]:
    env_value = os.environ.get("DOUBLES_ALLOWED_COURTS")
    if env_value:
        names = [item.strip() for item in env_value.split(",")]
        return tuple(name for name in names if name)
    stored = _read_settings().get("allowed_courts")
    if isinstance(stored, list) and stored:
        return tuple(str(item) for item in stored)
    return DEFAULT_ALLOWED_COURTS


def get_default_sets() -> int:
    raw = os.environ.get("DOUBLES_DEFAULT_SETS") or _read_settings().get("default_sets")
    try:
        value = int(raw) if raw is not None else DEFAULT_SETS_PER_MATCH
    except (TypeError, ValueError):
        return DEFAULT_SETS_PER_MATCH
    return value if value >= 1 else DEFAULT_SETS_PER_MATCH


def get_pairing_mode() -> str:
    value = os.environ.get("DOUBLES_PAIRING_MODE") or _read_settings().get("pairing_mode")
    if value in ("ranked", "random"):
        return str(value)
    return DEFAULT_PAIRING_MODE


def set_allowed_court_names(names: list[str]) -> None:
    settings = _read_settings()
    settings["allowed_courts"] = list(names)
    _write_settings(settings)


def set_pairing_mode(mode: str) -> None:
    if mode not in ("ranked", "random"):
        raise ValueError(f"Unknown pairing mode: {mode}")
    settings = _read_settings()
    settings["pairing_mode"] = mode
    _write_settings(settings)
