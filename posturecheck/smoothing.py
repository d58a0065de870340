from __future__ import annotations

from typing import Optional, Sequence

import numpy as np


DEFAULT_ALPHA = 0.3


class FeatureSmoother:
    """Exponential moving average over successive feature vectors."""

    def __init__(self, alpha: float = DEFAULT_ALPHA) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = float(alpha)
        self._value: Optional[np.ndarray] = None

    @property
    def value(self) -> Optional[np.ndarray]:
        return None if self._value is None else self._value.copy()

    def reset(self) -> None:
        self._value = None

    def update(self, vec: Sequence[float] | np.ndarray) -> np.ndarray:
        x = np.asarray(vec, dtype=float)
        if self._value is None:
            self._value = x.copy()
        elif self._value.shape != x.shape:
            # A stale vector from another profile must be reset, not blended.
            raise ValueError(
                f"Feature vector length changed from {self._value.shape[0]} to {x.shape[0]}; reset first"
            )
        else:
            self._value = self._value * (1.0 - self.alpha) + x * self.alpha
        return self._value.copy()
