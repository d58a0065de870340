from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from .alerts.sounds import CUES, DEFAULT_CUE
from .profiles import METRICS_PER_PROFILE, CameraAngle
from .training import PostureLabel


SCHEMA_VERSION = 2
EXPORT_TYPE = "posturecheck-config"


class ConfigImportError(ValueError):
    """Raised when an imported settings payload is rejected as a whole."""


class SampleRecord(BaseModel):
    label: PostureLabel
    angle: CameraAngle
    features: list[float]
    timestamp: int = 0  # epoch milliseconds

    @field_validator("features")
    @classmethod
    def _check_dimension(cls, value: list[float]) -> list[float]:
        if len(value) != METRICS_PER_PROFILE:
            raise ValueError(f"features must have {METRICS_PER_PROFILE} values, got {len(value)}")
        return value

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        if value in (None, ""):
            return 0
        return int(round(float(value)))


class PostureConfig(BaseModel):
    # camelCase on disk for compatibility with earlier exports.
    model_config = ConfigDict(populate_by_name=True)

    camera_angle: CameraAngle = Field(default=CameraAngle.FRONT, alias="cameraAngle")
    training_samples: list[SampleRecord] = Field(default_factory=list, alias="trainingSamples")
    selected_sound: str = Field(default=DEFAULT_CUE, alias="selectedSound")
    thresh_score: float = Field(default=0.5, ge=0.0, le=1.0, alias="threshScore")
    alert_delay: float = Field(default=5.0, ge=0.0, alias="alertDelay")
    alert_cooldown: float = Field(default=30.0, ge=0.0, alias="alertCooldown")
    sound: bool = True
    notify: bool = True

    @field_validator("selected_sound", mode="before")
    @classmethod
    def _known_cue(cls, value: Any) -> str:
        # Older payloads have no cue selection; unknown cues fall back too.
        text = str(value or "").strip()
        return text if text in CUES else DEFAULT_CUE

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def load_config(payload: Dict[str, Any]) -> PostureConfig:
    """Validate a persisted/exported payload, filling absent fields with defaults."""
    if not isinstance(payload, dict):
        raise ValueError("Settings payload must be a JSON object")
    data = {k: v for k, v in payload.items() if not str(k).startswith("_")}
    return PostureConfig.model_validate(data)


def persisted_payload(config: PostureConfig) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"_version": SCHEMA_VERSION}
    payload.update(config.to_payload())
    return payload


def export_payload(config: PostureConfig, now: Optional[datetime] = None) -> Dict[str, Any]:
    stamp = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "_type": EXPORT_TYPE,
        "_version": SCHEMA_VERSION,
        "_exported": stamp.isoformat(timespec="seconds"),
    }
    payload.update(config.to_payload())
    return payload


def parse_import(payload: Any) -> PostureConfig:
    if not isinstance(payload, dict) or payload.get("_type") != EXPORT_TYPE:
        raise ConfigImportError("Not a PostureCheck settings file.")
    version = payload.get("_version", SCHEMA_VERSION)
    try:
        version = int(version)
    except (TypeError, ValueError):
        raise ConfigImportError(f"Invalid settings version: {version!r}") from None
    if version > SCHEMA_VERSION:
        raise ConfigImportError(f"Settings file version {version} is newer than supported ({SCHEMA_VERSION}).")
    try:
        return load_config(payload)
    except ValidationError as exc:
        raise ConfigImportError(f"Invalid settings file: {exc.error_count()} invalid field(s).") from exc
