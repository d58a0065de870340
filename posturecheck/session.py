from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Any, FrozenSet, Optional, Tuple

import numpy as np

from .alerts.dispatcher import PostureHint
from .alerts.sounds import CUES
from .alerts.state import AlertAction, AlertPhase, AlertStateMachine
from .classifier import CentroidModel, classify, train_model, training_status
from .config import PostureConfig, SampleRecord
from .metrics.features import extract
from .metrics.keypoints import PoseFrame
from .profiles import AngleProfile, CameraAngle, get_profile, normalize_angle
from .smoothing import FeatureSmoother
from .training import PostureLabel, TrainingSample, TrainingStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorSettings:
    threshold: float = 0.5
    alert_delay: float = 5.0
    alert_cooldown: float = 30.0
    sound: bool = True
    notify: bool = True
    selected_sound: str = "chime"

    def __post_init__(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if not (self.alert_delay >= 0 and self.alert_cooldown >= 0):
            raise ValueError("alert delay and cooldown must be non-negative")
        if self.selected_sound not in CUES:
            raise ValueError(f"Unknown sound cue: {self.selected_sound}")


@dataclass(frozen=True)
class FrameResult:
    timestamp: float
    raw: Tuple[float, ...]
    features: Tuple[float, ...]
    score: Optional[float]
    is_good: Optional[bool]
    action: AlertAction
    phase: AlertPhase
    hint: PostureHint
    critical_ids: FrozenSet[int]


class PostureSession:
    """All mutable posture state for one user: samples, model, smoothing, alert timers."""

    def __init__(
        self,
        angle: str | CameraAngle = CameraAngle.FRONT,
        settings: Optional[MonitorSettings] = None,
        samples: Optional[list[TrainingSample]] = None,
        smoother: Optional[FeatureSmoother] = None,
    ) -> None:
        self._angle = normalize_angle(angle)
        self.settings = settings or MonitorSettings()
        self.store = TrainingStore(samples)
        self.smoother = smoother or FeatureSmoother()
        self.alerts = AlertStateMachine(self.settings.alert_delay, self.settings.alert_cooldown)
        self.model: Optional[CentroidModel] = None
        self.last_timestamp: Optional[float] = None
        self.last_result: Optional[FrameResult] = None
        self.retrain()

    @property
    def angle(self) -> CameraAngle:
        return self._angle

    @property
    def profile(self) -> AngleProfile:
        return get_profile(self._angle)

    @property
    def features(self) -> Optional[np.ndarray]:
        return self.smoother.value

    @property
    def trained(self) -> bool:
        return self.model is not None

    def counts(self) -> Tuple[int, int]:
        return self.store.counts(self._angle)

    def training_status(self) -> str:
        good, bad = self.counts()
        return training_status(good, bad, self.trained, self.profile.label)

    def retrain(self) -> Optional[CentroidModel]:
        self.model = train_model(self.store, self._angle)
        good, bad = self.counts()
        logger.debug(
            "event=retrain angle=%s good=%d bad=%d trained=%s",
            self._angle.value, good, bad, self.model is not None,
        )
        return self.model

    def set_angle(self, angle: str | CameraAngle) -> CameraAngle:
        self._angle = normalize_angle(angle)
        # Dimensions and meaning change with the profile.
        self.smoother.reset()
        self.last_result = None
        self.retrain()
        logger.info("event=set_angle angle=%s", self._angle.value)
        return self._angle

    def update_settings(self, **changes: Any) -> MonitorSettings:
        self.settings = replace(self.settings, **changes)
        self.alerts.delay = self.settings.alert_delay
        self.alerts.cooldown = self.settings.alert_cooldown
        return self.settings

    def process_frame(self, frame: PoseFrame, timestamp: float) -> Optional[FrameResult]:
        if self.last_timestamp is not None and timestamp == self.last_timestamp:
            return None
        self.last_timestamp = timestamp

        profile = self.profile
        sample = extract(frame, profile)
        smoothed = self.smoother.update(sample.weighted)
        result = classify(self.model, smoothed, self.settings.threshold)
        action = self.alerts.update(result.is_good, timestamp)

        self.last_result = FrameResult(
            timestamp=timestamp,
            raw=tuple(float(v) for v in sample.raw),
            features=tuple(float(v) for v in smoothed),
            score=result.score,
            is_good=result.is_good,
            action=action,
            phase=self.alerts.phase,
            hint=PostureHint.from_is_good(result.is_good),
            critical_ids=profile.critical_ids,
        )
        return self.last_result

    def capture(self, label: str | PostureLabel, timestamp_ms: Optional[int] = None) -> Optional[TrainingSample]:
        current = self.smoother.value
        if current is None:
            return None
        sample = TrainingSample(
            label=PostureLabel(label),
            angle=self._angle,
            features=tuple(float(v) for v in current),
            timestamp=timestamp_ms if timestamp_ms is not None else int(time.time() * 1000),
        )
        self.store.append(sample)
        self.retrain()
        logger.info("event=capture label=%s angle=%s total=%d", sample.label.value, sample.angle.value, len(self.store))
        return sample

    def undo(self) -> Optional[TrainingSample]:
        removed = self.store.pop_last()
        if removed is not None:
            self.retrain()
            logger.info("event=undo label=%s angle=%s", removed.label.value, removed.angle.value)
        return removed

    def clear(self) -> int:
        removed = self.store.clear()
        if removed:
            self.retrain()
            logger.info("event=clear removed=%d", removed)
        return removed

    def to_config(self) -> PostureConfig:
        return PostureConfig(
            camera_angle=self._angle,
            training_samples=[
                SampleRecord(label=s.label, angle=s.angle, features=list(s.features), timestamp=s.timestamp)
                for s in self.store
            ],
            selected_sound=self.settings.selected_sound,
            thresh_score=self.settings.threshold,
            alert_delay=self.settings.alert_delay,
            alert_cooldown=self.settings.alert_cooldown,
            sound=self.settings.sound,
            notify=self.settings.notify,
        )

    @staticmethod
    def settings_from_config(config: PostureConfig) -> MonitorSettings:
        return MonitorSettings(
            threshold=config.thresh_score,
            alert_delay=config.alert_delay,
            alert_cooldown=config.alert_cooldown,
            sound=config.sound,
            notify=config.notify,
            selected_sound=config.selected_sound,
        )

    @staticmethod
    def samples_from_config(config: PostureConfig) -> list[TrainingSample]:
        return [
            TrainingSample(label=r.label, angle=r.angle, features=tuple(r.features), timestamp=r.timestamp)
            for r in config.training_samples
        ]

    @classmethod
    def from_config(cls, config: PostureConfig) -> "PostureSession":
        return cls(
            angle=config.camera_angle,
            settings=cls.settings_from_config(config),
            samples=cls.samples_from_config(config),
        )

    def apply_config(self, config: PostureConfig) -> None:
        # Build everything first so a bad value cannot leave a half-applied state.
        settings = self.settings_from_config(config)
        samples = self.samples_from_config(config)
        self.store.replace(samples)
        self.settings = settings
        self.alerts.delay = settings.alert_delay
        self.alerts.cooldown = settings.alert_cooldown
        self.set_angle(config.camera_angle)
