from __future__ import annotations

from .features import FeatureSample, MetricKind, extract, format_metric
from .keypoints import Landmark, PoseFrame

__all__ = ["FeatureSample", "MetricKind", "extract", "format_metric", "Landmark", "PoseFrame"]
