import copy
import json
import os
from typing import Any, Callable, Optional
from hunt_tracker.services.base_service import IConfigService
from hunt_tracker.logger import logger

DEFAULT_CONFIG = {
    "analysis_interval_ms": 1000,
    "analyzer": {
        "exp_ratio_min": 0.5,
        "exp_ratio_max": 2.0,
        "percent_jump_limit": 10,
        "currency_unstick_streak": 5,
        "level_up_percent_drop": 50,
        "min_record_seconds": 10
    },
    "skip_zero_exp_records": True,
    "history_limit": 100,
    "regions": {"exp": None, "currency": None},
    "db_path": os.path.join("data", "hunt_history.db")
}

class ConfigService(IConfigService):
    def __init__(self, config_path: str = "config.json"):
        self.config_path = config_path
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        self._observers = []

    def initialize(self) -> bool:
        self.load()
        return True

    def add_observer(self, callback: Callable[[], None]) -> None:
        self._observers.append(callback)

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback()
            except Exception as e:
                logger.error(f"ConfigService: Error notifying observer: {e}")

    def shutdown(self) -> None:
        self.save()

    def load(self) -> None:
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        if not os.path.exists(self.config_path):
            return
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"ConfigService: Error loading config: {e}")
            return

        for key, value in stored.items():
            # Nested sections are merged so new default keys survive old files
            if isinstance(value, dict) and isinstance(self._config.get(key), dict):
                self._config[key].update(value)
            else:
                self._config[key] = value

    def save(self) -> bool:
        try:
            directory = os.path.dirname(self.config_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=4)
            self._notify_observers()
            return True
        except OSError as e:
            logger.error(f"ConfigService: Error saving config: {e}")
            return False

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value
        self.save()

    def __getitem__(self, key: str) -> Any:
        return self._config[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self._config

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    # --- Capture regions (owned by the capture collaborator, stored here) ---

    def save_region(self, kind: str, region: Optional[dict]) -> None:
        regions = dict(self._config.get("regions") or {})
        regions[kind] = region
        self.set("regions", regions)

    def load_region(self, kind: str) -> Optional[dict]:
        return (self._config.get("regions") or {}).get(kind)

    def has_regions(self) -> bool:
        regions = self._config.get("regions") or {}
        return any(r is not None for r in regions.values())

    def clear_regions(self) -> None:
        self.set("regions", {"exp": None, "currency": None})
