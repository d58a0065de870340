from __future__ import annotations

from typing import Optional

import numpy as np

from ..metrics.keypoints import PoseFrame


class PoseBackend:
    """Mediapipe-based pose: 2D landmarks plus world landmarks for one person."""

    def __init__(self, model_complexity: int = 0) -> None:
        # mediapipe is only needed for the live command.
        import mediapipe as mp

        # mp.solutions was dropped in mediapipe 0.10.30.
        if not hasattr(mp, "solutions"):
            raise RuntimeError(
                "Live posture tracking needs mediapipe's mp.solutions.pose. "
                "Install it with:  pip install 'posturecheck[live]'"
            )

        self.pose = mp.solutions.pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            enable_segmentation=False,
            min_detection_confidence=0.5,
            min_tracking_confidence=0.5,
        )

    def process_bgr(self, frame_bgr: np.ndarray) -> Optional[PoseFrame]:
        frame_rgb = np.ascontiguousarray(frame_bgr[:, :, ::-1])
        res = self.pose.process(frame_rgb)
        if res.pose_landmarks is None or res.pose_world_landmarks is None:
            return None
        return PoseFrame.from_points(res.pose_landmarks.landmark, res.pose_world_landmarks.landmark)

    def close(self) -> None:
        self.pose.close()
