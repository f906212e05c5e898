from typing import List, Dict, Any, Callable, Type, Optional
from dataclasses import dataclass, field
import time
from hunt_tracker.logger import logger

# --- EVENT BUS ---
class EventBus:
    def __init__(self):
        self._listeners: Dict[Type, List[Callable]] = {}

    def subscribe(self, event_type: Type, callback: Callable):
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)
        logger.debug(f"EventBus: Subscribed to {event_type.__name__}")

    def unsubscribe(self, event_type: Type, callback: Callable):
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def publish(self, event: Any):
        event_type = type(event)
        if event_type in self._listeners:
            for callback in list(self._listeners[event_type]):
                try:
                    callback(event)
                except Exception as e:
                    logger.error(f"EventBus Error processing {event_type.__name__}: {e}", exc_info=True)

# Global Accessor (trackers may also own a private bus)
bus = EventBus()

# --- EVENTS ---

@dataclass
class SessionStartedEvent:
    session: int  # 1-based count of sessions started by this tracker
    timestamp: float = field(default_factory=time.time)

@dataclass
class SnapshotEvent:
    snapshot: Any  # ResultSnapshot
    timestamp: float = field(default_factory=time.time)

@dataclass
class LevelUpEvent:
    """Derived by the tracker from ResultSnapshot.is_level_up."""
    exp_value: Optional[int]
    percent: Optional[float]
    timestamp: float = field(default_factory=time.time)

@dataclass
class SessionPausedEvent:
    paused: bool
    timestamp: float = field(default_factory=time.time)

@dataclass
class SessionRecordedEvent:
    record: Any  # SessionRecord
    timestamp: float = field(default_factory=time.time)

@dataclass
class SessionStoppedEvent:
    recorded: bool
    timestamp: float = field(default_factory=time.time)
