"""Posture monitoring from per-frame body keypoints."""

__version__ = "0.2.0"
