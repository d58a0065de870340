from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional


logger = logging.getLogger(__name__)

APP_NAME = "PostureCheck"
RELAY_MESSAGE_TYPE = "bad-posture"
RELAY_MESSAGE = "Fix your posture! 🧍"


@dataclass(frozen=True)
class Notification:
    title: str
    body: str
    tag: str
    timeout_s: float


POSTURE_NOTIFICATION = Notification(
    title="PostureCheck ⚠️",
    body="You've been slouching — sit up straight!",
    tag="posture-alert",
    timeout_s=6.0,
)


def relay_payload(message: str = RELAY_MESSAGE) -> Dict[str, str]:
    return {"type": RELAY_MESSAGE_TYPE, "message": message}


Runner = Callable[[List[str]], Any]


def _spawn(cmd: List[str]) -> Any:
    return subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


class DesktopNotifier:
    """In-session notifications through libnotify's notify-send."""

    def __init__(
        self,
        enabled: bool = True,
        command: Optional[str] = None,
        runner: Runner = _spawn,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.enabled = enabled
        self._command = command if command is not None else shutil.which("notify-send")
        self._runner = runner
        self._clock = clock
        self._live: Dict[str, float] = {}

    def permission_granted(self) -> bool:
        return bool(self.enabled and self._command)

    def is_live(self, tag: str) -> bool:
        expires = self._live.get(tag)
        return expires is not None and expires > self._clock()

    def notify(self, notification: Notification) -> bool:
        if not self.permission_granted():
            return False
        tag = notification.tag
        replacing = self.is_live(tag)
        cmd = [
            str(self._command),
            f"--app-name={APP_NAME}",
            "--urgency=critical",
            "-t",
            str(int(notification.timeout_s * 1000)),
            # Same-tag notifications replace each other instead of stacking.
            "-h",
            f"string:x-canonical-private-synchronous:{tag}",
            "-h",
            f"string:x-dunst-stack-tag:{tag}",
            notification.title,
            notification.body,
        ]
        try:
            self._runner(cmd)
        except Exception as exc:
            logger.warning("event=notify failed tag=%s error=%s", tag, exc)
            return False
        self._live[tag] = self._clock() + notification.timeout_s
        logger.info("event=notify tag=%s replaced=%s", tag, replacing)
        return True
