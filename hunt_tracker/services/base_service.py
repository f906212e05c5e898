from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Callable, List
from hunt_tracker.core.reading import Reading

class IService(ABC):
    """Base interface for all services."""
    @abstractmethod
    def initialize(self) -> bool:
        """Initialize the service. Returns True if successful."""
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Cleanup resources."""
        pass

class IConfigService(IService):
    """Interface for configuration management."""
    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def save(self) -> bool:
        pass

    @abstractmethod
    def add_observer(self, callback: Callable[[], None]) -> None:
        """Register a callback to be notified of config changes."""
        pass

class IReadingSource(IService):
    """
    Boundary to the capture/OCR collaborator.
    Produces one Reading per call; capture and recognition live outside this package.
    """
    @abstractmethod
    def read(self) -> Optional[Reading]:
        """Returns the next Reading, or None when the source is exhausted."""
        pass

class IRecordStore(IService):
    """Interface for persisted hunting-session records."""
    @abstractmethod
    def save_record(self, record) -> bool:
        pass

    @abstractmethod
    def load_history(self) -> List[Any]:
        """All records, newest first."""
        pass

    @abstractmethod
    def delete_record(self, record_id: str) -> bool:
        pass

    @abstractmethod
    def update_record_memo(self, record_id: str, memo: str) -> bool:
        pass

    @abstractmethod
    def clear_history(self) -> bool:
        pass

    @abstractmethod
    def get_history_count(self) -> int:
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Returns aggregated statistics."""
        pass

class ITrackerService(IService):
    """Interface for the session controller driving the analyzer."""
    @abstractmethod
    def start(self) -> bool:
        pass

    @abstractmethod
    def pause(self) -> bool:
        pass

    @abstractmethod
    def resume(self) -> bool:
        pass

    @abstractmethod
    def stop(self) -> Optional[Any]:
        """Stops the session and returns the stored record, if any."""
        pass

    @abstractmethod
    def tick(self) -> Optional[Any]:
        """Runs one analysis tick and returns the snapshot."""
        pass
