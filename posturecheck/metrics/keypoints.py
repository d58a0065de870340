from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Sequence

import numpy as np


NUM_LANDMARKS = 33


class Landmark(IntEnum):
    NOSE = 0
    LEFT_EAR = 7
    RIGHT_EAR = 8
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_HIP = 23
    RIGHT_HIP = 24


SKELETON_CONNECTIONS: tuple[tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 7),
    (0, 4), (4, 5), (5, 6), (6, 8),
    (9, 10),
    (11, 12), (11, 23), (12, 24), (23, 24),
    (11, 13), (13, 15),
    (12, 14), (14, 16),
    (23, 25), (25, 27),
    (24, 26), (26, 28),
)


def _point_row(p: Any) -> tuple[float, float, float, float]:
    # (x, y, visibility) | (x, y, z, visibility) | dict | mediapipe landmark
    if isinstance(p, dict):
        return (
            float(p.get("x", 0.0)),
            float(p.get("y", 0.0)),
            float(p.get("z", 0.0)),
            float(p.get("visibility", 0.0)),
        )
    if isinstance(p, (tuple, list, np.ndarray)):
        vals = [float(v) for v in p]
        if len(vals) == 3:
            return (vals[0], vals[1], 0.0, vals[2])
        if len(vals) == 4:
            return (vals[0], vals[1], vals[2], vals[3])
        raise ValueError(f"Keypoint needs 3 or 4 values, got {len(vals)}")
    return (
        float(getattr(p, "x")),
        float(getattr(p, "y")),
        float(getattr(p, "z", 0.0)),
        float(getattr(p, "visibility", 0.0)),
    )


def _as_array(points: Iterable[Any], what: str) -> np.ndarray:
    rows = [_point_row(p) for p in points]
    if len(rows) != NUM_LANDMARKS:
        raise ValueError(f"{what}: expected {NUM_LANDMARKS} keypoints, got {len(rows)}")
    return np.asarray(rows, dtype=float)


@dataclass(frozen=True)
class PoseFrame:
    # Rows are (x, y, z, visibility). landmarks: x/y normalised to [0,1];
    # world_landmarks: metres, origin at the hip midpoint.
    landmarks: np.ndarray
    world_landmarks: np.ndarray

    @staticmethod
    def from_points(landmarks: Sequence[Any], world_landmarks: Sequence[Any]) -> "PoseFrame":
        return PoseFrame(
            landmarks=_as_array(landmarks, "landmarks"),
            world_landmarks=_as_array(world_landmarks, "world_landmarks"),
        )

    def visibility(self, idx: int) -> float:
        return float(self.landmarks[idx, 3])

    def visible(self, threshold: float, *ids: int) -> bool:
        return all(self.visibility(i) >= threshold for i in ids)

    def image_xy(self, idx: int) -> np.ndarray:
        return self.landmarks[idx, :2]

    def world_xyz(self, idx: int) -> np.ndarray:
        return self.world_landmarks[idx, :3]
