import json
from typing import Optional, List, Tuple

from hunt_tracker.core.reading import Reading, parse_exp_text, parse_currency_text
from hunt_tracker.services.base_service import IReadingSource
from hunt_tracker.logger import logger


class ReplayReadingSource(IReadingSource):
    """
    Replays a recorded reading log (JSONL), one reading per line:
        {"t": 1700000000000, "exp": 55289816, "percent": 19.79, "currency": 78972001}
    or raw OCR text, parsed on load:
        {"t": 1700000001000, "exp_text": "EXP 55290100 [19.80%]", "currency_text": "78,972,001"}

    clock() returns the timestamp of the last reading so the analyzer runs on recorded time.
    """

    def __init__(self, path: str):
        self.path = path
        self._entries: List[Tuple[int, Reading]] = []
        self._index = 0
        self.current_ms = 0

    def initialize(self) -> bool:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            logger.error(f"ReplayReadingSource: Cannot open {self.path}: {e}")
            return False

        self._entries = []
        for line_no, line in enumerate(lines, start=1):
            line = line.strip()
            if not line: continue
            entry = self._parse_line(line)
            if entry is None:
                logger.warning(f"ReplayReadingSource: Skipping malformed line {line_no}")
                continue
            self._entries.append(entry)

        self._index = 0
        if self._entries:
            self.current_ms = self._entries[0][0]
        logger.info(f"ReplayReadingSource: Loaded {len(self._entries)} readings from {self.path}")
        return True

    def shutdown(self) -> None:
        self._entries = []

    @staticmethod
    def _parse_line(line: str) -> Optional[Tuple[int, Reading]]:
        try:
            data = json.loads(line)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        try:
            timestamp = int(data["t"])
        except (KeyError, TypeError, ValueError, OverflowError):
            return None

        if "exp_text" in data or "currency_text" in data:
            currency = parse_currency_text(data.get("currency_text") or "")
            return timestamp, parse_exp_text(data.get("exp_text") or "", currency=currency)
        reading = Reading.from_dict(data)
        # A value that is present but unusable (Infinity, 1e400, "abc") marks the line as corrupt
        for key, value in (("exp", reading.exp_value), ("percent", reading.percent), ("currency", reading.currency)):
            if data.get(key) is not None and value is None:
                return None
        return timestamp, reading

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._entries)

    def read(self) -> Optional[Reading]:
        if self.exhausted:
            return None
        timestamp, reading = self._entries[self._index]
        self._index += 1
        self.current_ms = timestamp
        return reading

    def clock(self) -> int:
        return self.current_ms
