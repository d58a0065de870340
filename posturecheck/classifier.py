from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from .profiles import CameraAngle, normalize_angle
from .training import PostureLabel, TrainingSample


# Fixed values; changing them changes what users see.
MIN_SAMPLES_PER_CLASS = 3
DEGENERATE_DISTANCE = 1e-4
AMBIGUOUS_SCORE = 0.5


@dataclass(frozen=True)
class CentroidModel:
    good_centroid: np.ndarray
    bad_centroid: np.ndarray
    good_count: int = 0
    bad_count: int = 0


@dataclass(frozen=True)
class Classification:
    score: Optional[float]
    is_good: Optional[bool]

    @property
    def known(self) -> bool:
        return self.is_good is not None


UNKNOWN = Classification(score=None, is_good=None)


def train_model(samples: Iterable[TrainingSample], angle: str | CameraAngle) -> Optional[CentroidModel]:
    angle = normalize_angle(angle)
    good: list[Sequence[float]] = []
    bad: list[Sequence[float]] = []
    for s in samples:
        if s.angle != angle:
            continue
        (good if s.label == PostureLabel.GOOD else bad).append(s.features)
    if len(good) < MIN_SAMPLES_PER_CLASS or len(bad) < MIN_SAMPLES_PER_CLASS:
        return None
    return CentroidModel(
        good_centroid=np.mean(np.asarray(good, dtype=float), axis=0),
        bad_centroid=np.mean(np.asarray(bad, dtype=float), axis=0),
        good_count=len(good),
        bad_count=len(bad),
    )


def score(model: CentroidModel, features: Sequence[float] | np.ndarray) -> float:
    """1.0 at the good centroid, 0.0 at the bad centroid."""
    v = np.asarray(features, dtype=float)
    dist_good = float(np.linalg.norm(v - model.good_centroid))
    dist_bad = float(np.linalg.norm(v - model.bad_centroid))
    total = dist_good + dist_bad
    if total < DEGENERATE_DISTANCE:
        return AMBIGUOUS_SCORE
    return dist_bad / total


def classify(
    model: Optional[CentroidModel],
    features: Optional[Sequence[float] | np.ndarray],
    threshold: float,
) -> Classification:
    if model is None or features is None:
        return UNKNOWN
    s = score(model, features)
    return Classification(score=s, is_good=s >= threshold)


def training_status(good: int, bad: int, trained: bool, label: str) -> str:
    if trained:
        return f"Trained with {good} good + {bad} bad samples for {label}"
    if good + bad == 0:
        return (
            f"Capture at least {MIN_SAMPLES_PER_CLASS} good + {MIN_SAMPLES_PER_CLASS} bad "
            "pose samples to enable detection."
        )
    need_good = max(0, MIN_SAMPLES_PER_CLASS - good)
    need_bad = max(0, MIN_SAMPLES_PER_CLASS - bad)
    parts = []
    if need_good:
        parts.append(f"{need_good} more good")
    if need_bad:
        parts.append(f"{need_bad} more bad")
    return f"Need {' + '.join(parts)} samples"
