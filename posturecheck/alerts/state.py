from __future__ import annotations

import logging
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class AlertPhase(str, Enum):
    IDLE = "IDLE"
    ACCRUING = "ACCRUING"
    FIRING = "FIRING"


class AlertAction(str, Enum):
    NONE = "none"
    FIRE = "fire"
    CLEAR = "clear"


class AlertStateMachine:
    """Delay + cooldown hysteresis over the good/bad stream.

    Timestamps are seconds on any monotonic clock. ``last_fired`` is kept
    across episodes, so the cooldown also applies to the first alert of a new
    episode.
    """

    def __init__(self, delay: float = 5.0, cooldown: float = 30.0) -> None:
        self.delay = float(delay)
        self.cooldown = float(cooldown)
        self.bad_since: Optional[float] = None
        self.last_fired: Optional[float] = None
        self._fired_this_episode = False

    @property
    def phase(self) -> AlertPhase:
        if self.bad_since is None:
            return AlertPhase.IDLE
        if self._fired_this_episode:
            return AlertPhase.FIRING
        return AlertPhase.ACCRUING

    def reset(self) -> None:
        self.bad_since = None
        self.last_fired = None
        self._fired_this_episode = False

    def update(self, is_good: Optional[bool], now: float) -> AlertAction:
        if is_good is None:
            return AlertAction.NONE

        if is_good:
            if self.bad_since is not None:
                logger.debug("event=episode_end duration=%.2f", now - self.bad_since)
            self.bad_since = None
            self._fired_this_episode = False
            return AlertAction.CLEAR

        if self.bad_since is None:
            self.bad_since = now
            logger.debug("event=episode_start t=%.3f", now)
            return AlertAction.NONE

        cooled = self.last_fired is None or (now - self.last_fired) >= self.cooldown
        if (now - self.bad_since) >= self.delay and cooled:
            self.last_fired = now
            self._fired_this_episode = True
            logger.info("event=alert_fire bad_for=%.2f", now - self.bad_since)
            return AlertAction.FIRE
        return AlertAction.NONE
