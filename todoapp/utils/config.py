# todoapp/utils/config.py
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .logging_setup import get_logger
from .paths import config_path

DEFAULT_PANEL_RATIO = 0.4
MIN_PANEL_RATIO = 0.2
MAX_PANEL_RATIO = 0.8

_DEFAULTS: Dict[str, Any] = {
    "panel_ratio": DEFAULT_PANEL_RATIO,
    "backup_enabled": True,
    "backup_retention_days": 30,
    "focus_minutes": 25,
}

_log = get_logger("config")


def default_settings() -> Dict[str, Any]:
    return dict(_DEFAULTS)


def validate_settings(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clamp values into their allowed ranges; zero/missing values take defaults."""
    out = {**_DEFAULTS, **data}

    ratio = float(out["panel_ratio"] or 0)
    if ratio == 0:
        ratio = DEFAULT_PANEL_RATIO
    out["panel_ratio"] = min(max(ratio, MIN_PANEL_RATIO), MAX_PANEL_RATIO)

    out["backup_enabled"] = bool(out["backup_enabled"])
    out["backup_retention_days"] = max(int(out["backup_retention_days"]), 1)
    out["focus_minutes"] = max(int(out["focus_minutes"]), 1)
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or config_path()
    if not path.exists():
        return default_settings()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("settings root must be an object")
        return validate_settings(raw)
    except (OSError, ValueError, TypeError) as exc:
        _log.warning("Ignoring unreadable settings %s: %s", path, exc)
        return default_settings()


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(validate_settings(data), indent=2) + "\n", encoding="utf-8")
    return path
