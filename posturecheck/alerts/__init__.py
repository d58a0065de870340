from __future__ import annotations

from .dispatcher import AlertDispatcher, OverlaySignal, PostureHint, TitleFlasher, VisualIndicator
from .state import AlertAction, AlertPhase, AlertStateMachine

__all__ = [
    "AlertAction",
    "AlertDispatcher",
    "AlertPhase",
    "AlertStateMachine",
    "OverlaySignal",
    "PostureHint",
    "TitleFlasher",
    "VisualIndicator",
]
