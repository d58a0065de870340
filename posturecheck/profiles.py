from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Tuple

from .metrics.features import MetricKind


METRICS_PER_PROFILE = 4


class CameraAngle(str, Enum):
    FRONT = "front"
    FRONT_LEFT = "front-left"
    FRONT_RIGHT = "front-right"
    SIDE_LEFT = "side-left"
    SIDE_RIGHT = "side-right"


@dataclass(frozen=True)
class FeatureDefinition:
    name: str
    kind: MetricKind
    weight: float

    def __post_init__(self) -> None:
        # Unknown kinds fail here rather than on the first frame.
        object.__setattr__(self, "kind", MetricKind(self.kind))
        object.__setattr__(self, "weight", float(self.weight))


@dataclass(frozen=True)
class AngleProfile:
    angle: CameraAngle
    label: str
    metrics: Tuple[FeatureDefinition, ...]
    # Keypoint ids highlighted by the skeleton renderer.
    critical_ids: FrozenSet[int]

    def __post_init__(self) -> None:
        if len(self.metrics) != METRICS_PER_PROFILE:
            raise ValueError(
                f"Profile {self.angle.value} needs {METRICS_PER_PROFILE} metrics, got {len(self.metrics)}"
            )

    @property
    def metric_names(self) -> list[str]:
        return [m.name for m in self.metrics]


def _fd(name: str, kind: MetricKind, weight: float) -> FeatureDefinition:
    return FeatureDefinition(name=name, kind=kind, weight=weight)


_ANGLED_METRICS = (
    _fd("Shoulder Tilt", MetricKind.SHOULDER_TILT, 0.7),
    _fd("Head Forward", MetricKind.HEAD_FORWARD_Z, 1.0),
    _fd("Spine Angle", MetricKind.SPINE_ANGLE, 1.0),
    _fd("Head Drop", MetricKind.HEAD_DROP, 0.8),
)

_SIDE_METRICS = (
    _fd("Head Forward", MetricKind.HEAD_FORWARD_Z, 1.0),
    _fd("Spine Angle", MetricKind.SPINE_ANGLE, 1.0),
    _fd("Head Drop", MetricKind.HEAD_DROP, 0.9),
    _fd("Neck Angle", MetricKind.NECK_ANGLE, 0.8),
)


PROFILES: Dict[CameraAngle, AngleProfile] = {
    CameraAngle.FRONT: AngleProfile(
        angle=CameraAngle.FRONT,
        label="Front-facing",
        metrics=(
            _fd("Shoulder Tilt", MetricKind.SHOULDER_TILT, 1.0),
            _fd("Head Forward", MetricKind.HEAD_FORWARD_Z, 0.6),
            _fd("Lateral Lean", MetricKind.LATERAL_LEAN, 1.0),
            _fd("Head Drop", MetricKind.HEAD_DROP, 0.8),
        ),
        critical_ids=frozenset({0, 7, 8, 11, 12}),
    ),
    CameraAngle.FRONT_LEFT: AngleProfile(
        angle=CameraAngle.FRONT_LEFT,
        label="45° from left",
        metrics=_ANGLED_METRICS,
        critical_ids=frozenset({0, 7, 11, 12, 23, 24}),
    ),
    CameraAngle.FRONT_RIGHT: AngleProfile(
        angle=CameraAngle.FRONT_RIGHT,
        label="45° from right",
        metrics=_ANGLED_METRICS,
        critical_ids=frozenset({0, 8, 11, 12, 23, 24}),
    ),
    CameraAngle.SIDE_LEFT: AngleProfile(
        angle=CameraAngle.SIDE_LEFT,
        label="Left side view",
        metrics=_SIDE_METRICS,
        critical_ids=frozenset({0, 7, 11, 23}),
    ),
    CameraAngle.SIDE_RIGHT: AngleProfile(
        angle=CameraAngle.SIDE_RIGHT,
        label="Right side view",
        metrics=_SIDE_METRICS,
        critical_ids=frozenset({0, 8, 12, 24}),
    ),
}


def normalize_angle(value: str | CameraAngle) -> CameraAngle:
    if isinstance(value, CameraAngle):
        return value
    text = str(value or "").strip().lower().replace("_", "-").replace(" ", "-")
    try:
        return CameraAngle(text)
    except ValueError:
        raise ValueError(f"Unsupported camera angle: {value}") from None


def get_profile(angle: str | CameraAngle) -> AngleProfile:
    return PROFILES[normalize_angle(angle)]
