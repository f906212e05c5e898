import time
from typing import Callable, Optional, Dict, Any

from hunt_tracker.core.level_up import LevelUpDetector
from hunt_tracker.core.rates import RateCalculator, ResultSnapshot
from hunt_tracker.core.reading import Reading
from hunt_tracker.core.records import SessionRecord, build_session_record
from hunt_tracker.core.session import HuntSession
from hunt_tracker.core.settings import AnalyzerSettings
from hunt_tracker.core.signal_filter import SignalFilter, FilterOutcome
from hunt_tracker.logger import logger


def now_ms() -> int:
    return int(time.time() * 1000)


class HuntAnalyzer:
    """
    Per-tick sampling/analysis state machine for one tracked target.

    Lifecycle: Idle (no baseline) -> Running -> Ended (stop) -> Idle.
    Pausing is the caller's business: it only shows up here as the cumulative
    paused_ms passed to analyze(), which is subtracted from elapsed time.

    Not thread-safe: one owner, one tick at a time.
    """

    def __init__(self, settings: Optional[AnalyzerSettings] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.settings = settings or AnalyzerSettings()
        self.clock = clock or now_ms
        self.session = HuntSession()
        self.signal_filter = SignalFilter(self.settings)
        self.level_up_detector = LevelUpDetector(self.settings.level_up_percent_drop)
        self.result = ResultSnapshot()
        self.last_outcome = FilterOutcome()

    def apply_settings(self, settings: AnalyzerSettings) -> None:
        self.settings = settings
        self.signal_filter = SignalFilter(settings)
        self.level_up_detector = LevelUpDetector(settings.level_up_percent_drop)

    def is_started(self) -> bool:
        return self.session.is_started

    def start(self, reading: Reading, paused_ms: int = 0) -> ResultSnapshot:
        """Sets the baseline from `reading`. Only valid while idle."""
        if self.session.is_started:
            logger.warning("HuntAnalyzer: start() ignored, session already running")
            return self.result
        self._begin(reading, paused_ms)
        return self.result

    def analyze(self, reading: Reading, paused_ms: int = 0) -> ResultSnapshot:
        """
        Per-tick entry point.
        While idle the reading becomes the baseline and a neutral snapshot is returned.
        """
        if not self.session.is_started:
            return self.start(reading, paused_ms)

        if self.level_up_detector.is_level_up(self.session.trusted, reading):
            logger.info(f"HuntAnalyzer: Level up detected ({self.session.trusted.last_percent}% -> {reading.percent}%). Re-baselining.")
            self._begin(reading, paused_ms)
            self.result.is_level_up = True
            return self.result

        trusted, outcome = self.signal_filter.apply(
            reading, self.session.trusted, self.session.baseline.currency
        )
        self.session.trusted = trusted
        self.last_outcome = outcome

        elapsed = self.session.elapsed_active_ms(self.clock(), paused_ms)
        self.result = RateCalculator.compute(self.session.baseline, trusted, elapsed)
        return self.result

    def reset(self) -> None:
        """Back to Idle without emitting a record."""
        self.session.clear()
        self.result = ResultSnapshot()
        self.last_outcome = FilterOutcome()
        logger.info("HuntAnalyzer: Reset")

    def create_session_record(self, timestamp_ms: Optional[int] = None) -> Optional[SessionRecord]:
        timestamp_ms = self.clock() if timestamp_ms is None else timestamp_ms
        return build_session_record(
            self.session.baseline, self.result, timestamp_ms, self.settings.min_record_seconds
        )

    def stop(self) -> Optional[SessionRecord]:
        """Ends the session: builds its record (if admissible) and returns to Idle."""
        record = self.create_session_record()
        self.reset()
        return record

    def get_debug_state(self) -> Dict[str, Any]:
        state = self.session.to_dict()
        state["last_outcome"] = {
            "exp_rejected": self.last_outcome.exp_rejected,
            "percent_rejected": self.last_outcome.percent_rejected,
            "currency_rejected": self.last_outcome.currency_rejected,
            "currency_unstuck": self.last_outcome.currency_unstuck,
        }
        return state

    def _begin(self, reading: Reading, paused_ms: int) -> None:
        self.session.begin(reading, self.clock(), paused_ms)
        self.last_outcome = FilterOutcome()
        self.result = RateCalculator.compute(self.session.baseline, self.session.trusted, 0)
        logger.info("HuntAnalyzer: Baseline set", extra={"data": reading.to_dict()})
