"""Live fan-out of task changes and presence over websockets."""

from __future__ import annotations

from .broker import ConnectionLimitExceeded, RealtimeBroker
from .presence import PresenceEntry, PresenceRegistry
from .publisher import TaskEventPublisher

__all__ = [
    "ConnectionLimitExceeded",
    "PresenceEntry",
    "PresenceRegistry",
    "RealtimeBroker",
    "TaskEventPublisher",
]
