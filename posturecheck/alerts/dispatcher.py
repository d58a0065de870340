from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, FrozenSet, List, Optional

from .channels import POSTURE_NOTIFICATION, RELAY_MESSAGE, Notification, relay_payload
from .state import AlertAction

if TYPE_CHECKING:
    from ..session import MonitorSettings


logger = logging.getLogger(__name__)

AUTO_HIDE_SECONDS = 5.0
TITLE_FLASH_INTERVAL = 0.8
TITLE_DEFAULT = "PostureCheck"
TITLE_ALERT = "⚠️ Fix Your Posture!"


class PostureHint(str, Enum):
    GOOD = "good"
    BAD = "bad"
    UNKNOWN = "unknown"

    @staticmethod
    def from_is_good(is_good: Optional[bool]) -> "PostureHint":
        if is_good is None:
            return PostureHint.UNKNOWN
        return PostureHint.GOOD if is_good else PostureHint.BAD


@dataclass(frozen=True)
class OverlaySignal:
    visible: bool
    hint: PostureHint
    critical_ids: FrozenSet[int]


class VisualIndicator:
    """Alert overlay flag; hides itself a fixed time after the last show."""

    def __init__(
        self,
        on_change: Optional[Callable[[bool], None]] = None,
        auto_hide: float = AUTO_HIDE_SECONDS,
    ) -> None:
        self.auto_hide = float(auto_hide)
        self._on_change = on_change
        self._visible = False
        self._hide_at: Optional[float] = None

    @property
    def visible(self) -> bool:
        return self._visible

    def show(self, now: float) -> None:
        self._hide_at = now + self.auto_hide
        self._set(True)

    def hide(self) -> None:
        self._hide_at = None
        self._set(False)

    def tick(self, now: float) -> None:
        if self._visible and self._hide_at is not None and now >= self._hide_at:
            self.hide()

    def _set(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        if self._on_change is not None:
            self._on_change(visible)


class TitleFlasher:
    def __init__(
        self,
        on_title: Optional[Callable[[str], None]] = None,
        default: str = TITLE_DEFAULT,
        alert: str = TITLE_ALERT,
        interval: float = TITLE_FLASH_INTERVAL,
    ) -> None:
        self.default = default
        self.alert = alert
        self.interval = float(interval)
        self.on_title = on_title
        self._started_at: Optional[float] = None
        self._title = default

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def title(self) -> str:
        return self._title

    def start(self, now: float) -> None:
        if self._started_at is not None:
            return
        self._started_at = now

    def stop(self) -> None:
        if self._started_at is None:
            return
        self._started_at = None
        self._set(self.default)

    def tick(self, now: float) -> None:
        if self._started_at is None:
            return
        steps = int((now - self._started_at) // self.interval)
        if steps <= 0:
            return
        # First step shows the alert text, then alternate.
        self._set(self.alert if steps % 2 == 1 else self.default)

    def _set(self, title: str) -> None:
        if title == self._title:
            return
        self._title = title
        if self.on_title is not None:
            self.on_title(title)


class AlertDispatcher:
    """Fans fire/clear out to overlay, audio, one notification channel and the title."""

    def __init__(
        self,
        audio: Any = None,
        notifier: Any = None,
        relay: Any = None,
        indicator: Optional[VisualIndicator] = None,
        title: Optional[TitleFlasher] = None,
        notification: Notification = POSTURE_NOTIFICATION,
        relay_message: str = RELAY_MESSAGE,
    ) -> None:
        self.audio = audio
        self.notifier = notifier
        self.relay = relay
        self.indicator = indicator or VisualIndicator()
        self.title = title or TitleFlasher()
        self.notification = notification
        self.relay_message = relay_message

    def handle(self, action: AlertAction, now: float, settings: "MonitorSettings") -> List[str]:
        if action == AlertAction.FIRE:
            return self.fire(now, settings)
        if action == AlertAction.CLEAR:
            self.clear()
        return []

    def fire(self, now: float, settings: "MonitorSettings") -> List[str]:
        used: List[str] = ["visual"]
        self.indicator.show(now)

        if settings.sound and self.audio is not None:
            try:
                self.audio.play_cue(settings.selected_sound)
                used.append("audio")
            except Exception as exc:
                logger.warning("event=dispatch channel=audio error=%s", exc)

        if settings.notify:
            channel = self._notify()
            if channel:
                used.append(channel)

        self.title.start(now)
        used.append("title")
        logger.info("event=dispatch_fire channels=%s", ",".join(used))
        return used

    def _notify(self) -> Optional[str]:
        # At most one notification channel per alert.
        if self.notifier is not None and self._permission_granted():
            try:
                delivered = self.notifier.notify(self.notification)
            except Exception as exc:
                logger.warning("event=dispatch channel=notification error=%s", exc)
                return None
            if delivered is False:
                logger.warning("event=dispatch channel=notification delivered=false")
                return None
            return "notification"
        if self.relay is not None:
            try:
                self.relay.send(relay_payload(self.relay_message))
            except Exception as exc:
                logger.debug("event=dispatch channel=relay error=%s", exc)
            return "relay"
        return None

    def _permission_granted(self) -> bool:
        try:
            return bool(self.notifier.permission_granted())
        except Exception:
            return False

    def clear(self) -> None:
        self.indicator.hide()
        self.title.stop()

    def tick(self, now: float) -> None:
        self.indicator.tick(now)
        self.title.tick(now)

    def overlay(self, hint: PostureHint, critical_ids: FrozenSet[int]) -> OverlaySignal:
        return OverlaySignal(visible=self.indicator.visible, hint=hint, critical_ids=critical_ids)
