"""
In-memory event queue shared by the engines.

Engines append typed events in the order they happen; drivers either
subscribe callbacks per kind or drain the queue between steps.
"""
import enum
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable


class EventKind(enum.Enum):
    BALL = "ball"
    OVER = "over"
    INNINGS_END = "innings_end"
    MATCH_END = "match_end"
    LOT_START = "lot_start"
    BID = "bid"
    LOT_SOLD = "lot_sold"
    LOT_UNSOLD = "lot_unsold"
    SESSION_END = "session_end"
    MATCH_COMPLETED = "match_completed"
    STAGE_ADVANCE = "stage_advance"
    TOURNAMENT_END = "tournament_end"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    payload: Any = None


@dataclass
class EventQueue:
    """Append-only event stream with optional synchronous subscribers"""
    pending: deque = field(default_factory=deque)
    subscribers: dict = field(default_factory=dict)  # EventKind -> list[callable]

    def subscribe(self, kind: EventKind, callback: Callable[[Any], None]) -> None:
        self.subscribers.setdefault(kind, []).append(callback)

    def emit(self, kind: EventKind, payload: Any = None) -> Event:
        event = Event(kind=kind, payload=payload)
        self.pending.append(event)
        for callback in self.subscribers.get(kind, []):
            callback(payload)
        return event

    def drain(self) -> list[Event]:
        events = list(self.pending)
        self.pending.clear()
        return events

    def __len__(self) -> int:
        return len(self.pending)
