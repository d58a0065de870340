from __future__ import annotations

from .state_store import StateStore

__all__ = ["StateStore"]
