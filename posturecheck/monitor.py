from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .alerts.dispatcher import AlertDispatcher, OverlaySignal, PostureHint
from .config import ConfigImportError
from .metrics.keypoints import PoseFrame
from .profiles import CameraAngle
from .session import FrameResult, MonitorSettings, PostureSession
from .storage.state_store import StateStore
from .training import PostureLabel, TrainingSample


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    ok: bool
    status_message: str


class PostureMonitor:
    """Connects a session to alert channels and persists every user change."""

    def __init__(
        self,
        session: PostureSession,
        dispatcher: Optional[AlertDispatcher] = None,
        store: Optional[StateStore] = None,
    ) -> None:
        self.session = session
        self.dispatcher = dispatcher or AlertDispatcher()
        self.store = store

    @classmethod
    def load(cls, store: StateStore, dispatcher: Optional[AlertDispatcher] = None) -> "PostureMonitor":
        return cls(PostureSession.from_config(store.load()), dispatcher=dispatcher, store=store)

    @property
    def settings(self) -> MonitorSettings:
        return self.session.settings

    def on_frame(self, frame: PoseFrame, timestamp: float) -> Optional[FrameResult]:
        result = self.session.process_frame(frame, timestamp)
        if result is None:
            return None
        self.dispatcher.handle(result.action, timestamp, self.session.settings)
        self.dispatcher.tick(timestamp)
        return result

    def tick(self, now: float) -> None:
        self.dispatcher.tick(now)

    def overlay(self) -> OverlaySignal:
        last = self.session.last_result
        hint = last.hint if last is not None else PostureHint.UNKNOWN
        return self.dispatcher.overlay(hint, self.session.profile.critical_ids)

    def capture(self, label: str | PostureLabel) -> Optional[TrainingSample]:
        sample = self.session.capture(label)
        if sample is not None:
            self.save()
        return sample

    def undo(self) -> Optional[TrainingSample]:
        removed = self.session.undo()
        if removed is not None:
            self.save()
        return removed

    def clear(self, confirmed: bool) -> int:
        if not confirmed:
            return 0
        removed = self.session.clear()
        self.save()
        return removed

    def set_angle(self, angle: str | CameraAngle) -> CameraAngle:
        angle = self.session.set_angle(angle)
        self.save()
        return angle

    def update_settings(self, **changes: Any) -> MonitorSettings:
        settings = self.session.update_settings(**changes)
        self.save()
        return settings

    def save(self) -> None:
        if self.store is not None:
            self.store.save(self.session.to_config())

    def export_config(self, path: Path) -> Path:
        out = StateStore.export_to(Path(path), self.session.to_config())
        logger.info("event=export path=%s samples=%d", out, len(self.session.store))
        return out

    def import_config(self, path: Path) -> ImportResult:
        try:
            config = StateStore.import_from(Path(path))
            self.session.apply_config(config)
        except (ConfigImportError, ValueError) as exc:
            logger.warning("event=import_rejected path=%s error=%s", path, exc)
            return ImportResult(ok=False, status_message=f"Import failed: {exc}")
        self.save()
        count = len(self.session.store)
        logger.info("event=import path=%s samples=%d", path, count)
        return ImportResult(ok=True, status_message=f"Imported {count} samples.")
