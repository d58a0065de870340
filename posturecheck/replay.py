from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .alerts.state import AlertAction
from .metrics.keypoints import PoseFrame
from .monitor import PostureMonitor


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayEvent:
    timestamp: float
    action: AlertAction
    score: Optional[float]


def read_frames(path: Path) -> Iterator[Tuple[float, Optional[PoseFrame]]]:
    """Yield (t, frame) from a JSON-lines keypoint log; frame is None when no person was found."""
    with Path(path).open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
                t = float(row["t"])
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("event=replay_skip line=%d error=%s", lineno, exc)
                continue
            landmarks = row.get("landmarks")
            world = row.get("world_landmarks")
            if not landmarks or not world:
                yield t, None
                continue
            try:
                yield t, PoseFrame.from_points(landmarks, world)
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("event=replay_skip line=%d error=%s", lineno, exc)


def run_replay(monitor: PostureMonitor, path: Path) -> List[ReplayEvent]:
    events: List[ReplayEvent] = []
    for t, frame in read_frames(path):
        if frame is None:
            monitor.tick(t)
            continue
        result = monitor.on_frame(frame, t)
        if result is None or result.action == AlertAction.NONE:
            continue
        # Consecutive good frames all emit CLEAR; report only the first.
        if result.action == AlertAction.CLEAR and events and events[-1].action == AlertAction.CLEAR:
            continue
        if result.action == AlertAction.CLEAR and not events:
            continue
        events.append(ReplayEvent(timestamp=t, action=result.action, score=result.score))
    return events
