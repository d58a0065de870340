from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .relay import DEFAULT_RECONNECT_DELAY, DEFAULT_RELAY_URL


_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SETTINGS_PATH = _ROOT / "config" / "posturecheck.yaml"


@dataclass
class RuntimeSettings:
    state_path: str = str(_ROOT / "config" / "posture_state.json")
    log_path: str = str(_ROOT / "logs" / "posturecheck.log")
    log_level: str = "INFO"
    relay_url: str = DEFAULT_RELAY_URL
    relay_reconnect_seconds: float = DEFAULT_RECONNECT_DELAY
    relay_enabled: bool = True
    desktop_notifications: bool = True
    camera: str = "0"
    width: int = 640
    height: int = 480


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_runtime_settings(path: Optional[Path] = None) -> RuntimeSettings:
    data = _read_yaml(path or DEFAULT_SETTINGS_PATH)
    settings = RuntimeSettings()
    for f in fields(RuntimeSettings):
        if f.name not in data or data[f.name] is None:
            continue
        default = getattr(settings, f.name)
        try:
            if isinstance(default, bool):
                value: Any = bool(data[f.name])
            else:
                value = type(default)(data[f.name])
        except (TypeError, ValueError):
            continue
        setattr(settings, f.name, value)
    return settings
