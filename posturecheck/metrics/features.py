from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Tuple

import numpy as np

from .keypoints import Landmark, PoseFrame

if TYPE_CHECKING:
    from ..profiles import AngleProfile


NOSE = Landmark.NOSE
LS = Landmark.LEFT_SHOULDER
RS = Landmark.RIGHT_SHOULDER
LH = Landmark.LEFT_HIP
RH = Landmark.RIGHT_HIP

_MIN_DENOM = 0.001


def _nz(value: float) -> float:
    # Zero denominators are replaced, not guarded against.
    return value or _MIN_DENOM


def shoulder_tilt(frame: PoseFrame) -> float:
    if not frame.visible(0.4, LS, RS):
        return 0.0
    ls, rs = frame.image_xy(LS), frame.image_xy(RS)
    dy = rs[1] - ls[1]
    dx = _nz(abs(rs[0] - ls[0]))
    return math.degrees(math.atan2(dy, dx))


def head_forward_z(frame: PoseFrame) -> float:
    # Negative = head in front of the shoulders.
    if not frame.visible(0.4, NOSE, LS, RS):
        return 0.0
    nose = frame.world_xyz(NOSE)
    shoulder_mid_z = (frame.world_xyz(LS)[2] + frame.world_xyz(RS)[2]) / 2.0
    return float(nose[2] - shoulder_mid_z)


def lateral_lean(frame: PoseFrame) -> float:
    if not frame.visible(0.4, NOSE, LS, RS):
        return 0.0
    nose, ls, rs = frame.image_xy(NOSE), frame.image_xy(LS), frame.image_xy(RS)
    mid_x = (ls[0] + rs[0]) / 2.0
    width = _nz(abs(rs[0] - ls[0]))
    return float((nose[0] - mid_x) / width)


def head_drop(frame: PoseFrame) -> float:
    if not frame.visible(0.4, NOSE, LS, RS):
        return 0.0
    nose, ls, rs = frame.image_xy(NOSE), frame.image_xy(LS), frame.image_xy(RS)
    mid_y = (ls[1] + rs[1]) / 2.0
    return float(mid_y - nose[1])


def spine_angle(frame: PoseFrame) -> float:
    if not frame.visible(0.3, LS, RS):
        return 0.0
    ls, rs = frame.world_xyz(LS), frame.world_xyz(RS)
    s_mid = (ls + rs) / 2.0
    if not frame.visible(0.2, LH, RH):
        # Hips occluded: head-over-shoulders as a proxy.
        nose = frame.world_xyz(NOSE)
        dx = nose[0] - s_mid[0]
        dy = nose[1] - s_mid[1]
        return math.degrees(math.atan2(dx, _nz(abs(dy))))
    h_mid = (frame.world_xyz(LH) + frame.world_xyz(RH)) / 2.0
    dx = s_mid[0] - h_mid[0]
    dy = h_mid[1] - s_mid[1]  # world y grows downward
    return math.degrees(math.atan2(dx, _nz(dy)))


def neck_angle(frame: PoseFrame) -> float:
    if not frame.visible(0.4, NOSE) or not frame.visible(0.3, LS, RS):
        return 0.0
    nose = frame.world_xyz(NOSE)
    s_mid = (frame.world_xyz(LS) + frame.world_xyz(RS)) / 2.0
    dx, dy, dz = nose - s_mid
    horizontal = math.sqrt(dx * dx + dz * dz)
    return math.degrees(math.atan2(horizontal, _nz(abs(dy))))


class MetricKind(str, Enum):
    SHOULDER_TILT = "shoulderTilt"
    HEAD_FORWARD_Z = "headForwardZ"
    LATERAL_LEAN = "lateralLean"
    HEAD_DROP = "headDrop"
    SPINE_ANGLE = "spineAngle"
    NECK_ANGLE = "neckAngle"

    def compute(self, frame: PoseFrame) -> float:
        return float(METRIC_FUNCTIONS[self](frame))


METRIC_FUNCTIONS: Dict[MetricKind, Callable[[PoseFrame], float]] = {
    MetricKind.SHOULDER_TILT: shoulder_tilt,
    MetricKind.HEAD_FORWARD_Z: head_forward_z,
    MetricKind.LATERAL_LEAN: lateral_lean,
    MetricKind.HEAD_DROP: head_drop,
    MetricKind.SPINE_ANGLE: spine_angle,
    MetricKind.NECK_ANGLE: neck_angle,
}


@dataclass(frozen=True)
class FeatureSample:
    raw: np.ndarray
    weighted: np.ndarray


def extract(frame: PoseFrame, profile: "AngleProfile") -> FeatureSample:
    raw = np.array([m.kind.compute(frame) for m in profile.metrics], dtype=float)
    weights = np.array([m.weight for m in profile.metrics], dtype=float)
    return FeatureSample(raw=raw, weighted=raw * weights)


def format_metric(kind: MetricKind, raw: float) -> Tuple[str, float]:
    """Display text and a 0-100 bar fill for one raw metric value."""
    if kind in (MetricKind.SHOULDER_TILT, MetricKind.SPINE_ANGLE, MetricKind.NECK_ANGLE):
        return f"{raw:.1f}°", min(abs(raw) / 30.0 * 100.0, 100.0)
    if kind == MetricKind.HEAD_FORWARD_Z:
        return f"{raw * 100.0:.1f}cm", min(abs(raw) / 0.15 * 100.0, 100.0)
    if kind == MetricKind.LATERAL_LEAN:
        return f"{raw:.3f}", min(abs(raw) / 0.5 * 100.0, 100.0)
    return f"{raw:.3f}", min(abs(raw) / 0.3 * 100.0, 100.0)
