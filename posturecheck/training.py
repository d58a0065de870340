from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple

from .profiles import CameraAngle, normalize_angle


class PostureLabel(str, Enum):
    GOOD = "good"
    BAD = "bad"


@dataclass(frozen=True)
class TrainingSample:
    label: PostureLabel
    angle: CameraAngle
    features: Tuple[float, ...]
    timestamp: int  # epoch milliseconds

    def __post_init__(self) -> None:
        object.__setattr__(self, "label", PostureLabel(self.label))
        object.__setattr__(self, "angle", normalize_angle(self.angle))
        object.__setattr__(self, "features", tuple(float(v) for v in self.features))
        object.__setattr__(self, "timestamp", int(self.timestamp))


class TrainingStore:
    """Labelled samples for every angle, in capture order."""

    def __init__(self, samples: Optional[Iterable[TrainingSample]] = None) -> None:
        self._samples: list[TrainingSample] = list(samples or [])

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[TrainingSample]:
        return iter(list(self._samples))

    @property
    def samples(self) -> list[TrainingSample]:
        return list(self._samples)

    def append(self, sample: TrainingSample) -> None:
        self._samples.append(sample)

    def pop_last(self) -> Optional[TrainingSample]:
        # Most recent overall, not most recent for the active angle.
        if not self._samples:
            return None
        return self._samples.pop()

    def clear(self) -> int:
        removed = len(self._samples)
        self._samples = []
        return removed

    def replace(self, samples: Iterable[TrainingSample]) -> None:
        self._samples = list(samples)

    def for_angle(self, angle: str | CameraAngle) -> list[TrainingSample]:
        angle = normalize_angle(angle)
        return [s for s in self._samples if s.angle == angle]

    def counts(self, angle: str | CameraAngle) -> Tuple[int, int]:
        subset = self.for_angle(angle)
        good = sum(1 for s in subset if s.label == PostureLabel.GOOD)
        return good, len(subset) - good
