from __future__ import annotations

from typing import Iterable, Tuple

import cv2
import numpy as np

from ..alerts.dispatcher import OverlaySignal, PostureHint
from ..metrics.keypoints import SKELETON_CONNECTIONS, PoseFrame


# BGR
HINT_COLOURS = {
    PostureHint.GOOD: (118, 230, 0),
    PostureHint.BAD: (68, 23, 255),
    PostureHint.UNKNOWN: (255, 77, 124),
}
_DIM = (90, 90, 90)
_MIN_VISIBILITY = 0.35
_FONT = cv2.FONT_HERSHEY_SIMPLEX


def _px(pose: PoseFrame, idx: int, w: int, h: int) -> Tuple[int, int]:
    x, y = pose.image_xy(idx)
    return (int(x * w), int(y * h))


def draw_skeleton(frame: np.ndarray, pose: PoseFrame, signal: OverlaySignal) -> np.ndarray:
    out = frame.copy()
    h, w = out.shape[:2]
    active = HINT_COLOURS[signal.hint]
    critical = signal.critical_ids

    # lines
    for a, b in SKELETON_CONNECTIONS:
        if pose.visibility(a) < _MIN_VISIBILITY or pose.visibility(b) < _MIN_VISIBILITY:
            continue
        is_posture = a in critical and b in critical
        cv2.line(
            out,
            _px(pose, a, w, h),
            _px(pose, b, w, h),
            active if is_posture else _DIM,
            4 if is_posture else 2,
            cv2.LINE_AA,
        )

    # joints
    for i in range(pose.landmarks.shape[0]):
        if pose.visibility(i) < _MIN_VISIBILITY:
            continue
        is_posture = i in critical
        cv2.circle(out, _px(pose, i, w, h), 6 if is_posture else 3, active if is_posture else _DIM, -1)

    if signal.visible:
        draw_alert_banner(out)
    return out


def draw_alert_banner(frame: np.ndarray, text: str = "Fix your posture!") -> None:
    h, w = frame.shape[:2]
    red = HINT_COLOURS[PostureHint.BAD]
    cv2.rectangle(frame, (0, 0), (w - 1, h - 1), red, 8)
    (tw, th), _ = cv2.getTextSize(text, _FONT, 1.0, 2)
    x = max(0, (w - tw) // 2)
    y = th + 24
    cv2.rectangle(frame, (x - 10, y - th - 10), (x + tw + 10, y + 10), red, -1)
    cv2.putText(frame, text, (x, y), _FONT, 1.0, (255, 255, 255), 2, cv2.LINE_AA)


def draw_hud(frame: np.ndarray, lines: Iterable[str], y0: int | None = None) -> None:
    h = frame.shape[0]
    lines = list(lines)
    y = y0 if y0 is not None else h - 12 - 20 * (len(lines) - 1)
    for line in lines:
        cv2.putText(frame, line, (12, y), _FONT, 0.5, (0, 0, 0), 3, cv2.LINE_AA)
        cv2.putText(frame, line, (12, y), _FONT, 0.5, (235, 235, 235), 1, cv2.LINE_AA)
        y += 20
