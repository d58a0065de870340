from __future__ import annotations

import logging
import time
from typing import List, Optional

import cv2

from .classifier import MIN_SAMPLES_PER_CLASS
from .metrics.features import format_metric
from .monitor import PostureMonitor
from .profiles import CameraAngle
from .session import FrameResult
from .training import PostureLabel
from .vision.overlay import draw_alert_banner, draw_hud, draw_skeleton
from .vision.pose import PoseBackend


logger = logging.getLogger(__name__)

WINDOW_NAME = "PostureCheck"
_ANGLE_KEYS = {ord(str(i + 1)): angle for i, angle in enumerate(CameraAngle)}
_THRESHOLD_STEP = 0.05


def hud_lines(monitor: PostureMonitor, result: Optional[FrameResult], pending_clear: bool) -> List[str]:
    session = monitor.session
    profile = session.profile
    lines = [f"View: {profile.label}  [1-5]"]
    if not session.trained:
        good, bad = session.counts()
        need_good = max(0, MIN_SAMPLES_PER_CLASS - good)
        need_bad = max(0, MIN_SAMPLES_PER_CLASS - bad)
        lines.append(f"Untrained - need {need_good} good, {need_bad} bad")
    elif result is not None and result.is_good is not None:
        verdict = "Good posture" if result.is_good else "Bad posture"
        lines.append(f"{verdict}  score {result.score * 100:.0f}%  threshold {session.settings.threshold:.2f}")
    if result is not None:
        metrics = []
        for definition, raw in zip(profile.metrics, result.raw):
            text, _pct = format_metric(definition.kind, raw)
            metrics.append(f"{definition.name} {text}")
        lines.append("  ".join(metrics))
    lines.append(session.training_status())
    if pending_clear:
        lines.append("Clear ALL training samples? press y to confirm")
    else:
        lines.append("g good  b bad  z undo  c clear  +/- threshold  q quit")
    return lines


def run_live(
    monitor: PostureMonitor,
    camera: int | str = 0,
    width: int = 640,
    height: int = 480,
) -> None:
    cap = cv2.VideoCapture(camera)
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open camera {camera!r}")

    backend = PoseBackend()
    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    monitor.dispatcher.title.on_title = lambda text: cv2.setWindowTitle(WINDOW_NAME, text)
    pending_clear = False
    result: Optional[FrameResult] = None
    logger.info("event=live_start camera=%r angle=%s", camera, monitor.session.angle.value)

    try:
        while True:
            ok, frame = cap.read()
            if not ok or frame is None:
                logger.warning("event=camera_read_failed")
                time.sleep(0.05)
                continue

            now = time.monotonic()
            pose = backend.process_bgr(frame)
            if pose is not None:
                result = monitor.on_frame(pose, now) or result
                out = draw_skeleton(frame, pose, monitor.overlay())
            else:
                monitor.tick(now)
                out = frame.copy()
                if monitor.overlay().visible:
                    draw_alert_banner(out)
            draw_hud(out, hud_lines(monitor, result, pending_clear))
            cv2.imshow(WINDOW_NAME, out)

            key = cv2.waitKey(1) & 0xFF
            if key in (ord('q'), ord('Q')):
                break
            if pending_clear:
                if key != 255:
                    monitor.clear(confirmed=key in (ord('y'), ord('Y')))
                    pending_clear = False
                continue
            if key in (ord('g'), ord('G')):
                monitor.capture(PostureLabel.GOOD)
            elif key in (ord('b'), ord('B')):
                monitor.capture(PostureLabel.BAD)
            elif key in (ord('z'), ord('Z')):
                monitor.undo()
            elif key in (ord('c'), ord('C')):
                pending_clear = True
            elif key in _ANGLE_KEYS:
                monitor.set_angle(_ANGLE_KEYS[key])
                result = None
            elif key in (ord('+'), ord('=')):
                new = min(1.0, monitor.settings.threshold + _THRESHOLD_STEP)
                monitor.update_settings(threshold=round(new, 2))
            elif key in (ord('-'), ord('_')):
                new = max(0.0, monitor.settings.threshold - _THRESHOLD_STEP)
                monitor.update_settings(threshold=round(new, 2))
    finally:
        monitor.dispatcher.clear()
        cap.release()
        backend.close()
        cv2.destroyAllWindows()
        logger.info("event=live_stop")
