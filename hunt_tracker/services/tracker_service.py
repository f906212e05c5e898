import time
from enum import Enum
from typing import Callable, Optional, Dict, Any

from hunt_tracker.core.analyzer import HuntAnalyzer, now_ms
from hunt_tracker.core.events import (
    bus as default_bus, EventBus, SessionStartedEvent, SnapshotEvent, LevelUpEvent,
    SessionPausedEvent, SessionRecordedEvent, SessionStoppedEvent
)
from hunt_tracker.core.rates import ResultSnapshot
from hunt_tracker.core.records import SessionRecord
from hunt_tracker.core.settings import AnalyzerSettings
from hunt_tracker.services.base_service import ITrackerService, IConfigService, IReadingSource, IRecordStore
from hunt_tracker.logger import logger, update_log_context


class TrackerState(Enum):
    IDLE = "Idle"
    RUNNING = "Running"
    PAUSED = "Paused"


class TrackerService(ITrackerService):
    """
    Caller-side controller around one HuntAnalyzer.
    Owns the start/pause/resume/stop lifecycle, the paused-time counter,
    the tick loop and record persistence. Ticks never overlap.
    """

    def __init__(self, config: IConfigService, source: IReadingSource, store: IRecordStore,
                 bus: Optional[EventBus] = None, clock: Optional[Callable[[], int]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.source = source
        self.store = store
        self.bus = bus or default_bus
        self.clock = clock or now_ms
        self.sleep = sleep

        self.analyzer = HuntAnalyzer(AnalyzerSettings.from_config(config), clock=self.clock)
        self.state = TrackerState.IDLE
        self.running = False
        self.source_exhausted = False

        # Pause accounting (cumulative over the session, in ms)
        self.paused_ms = 0
        self._pause_started: Optional[int] = None
        self._pending_settings: Optional[AnalyzerSettings] = None

        self.last_snapshot: Optional[ResultSnapshot] = None
        self.session_count = 0

    def initialize(self) -> bool:
        logger.info("TrackerService: Initializing...")
        update_log_context("phase", self.state.value)
        self.config.add_observer(self.on_config_changed)
        self.running = True
        return True

    def shutdown(self) -> None:
        self.running = False
        if self.state != TrackerState.IDLE:
            self.stop()

    def on_config_changed(self) -> None:
        settings = AnalyzerSettings.from_config(self.config)
        if self.analyzer.is_started():
            # Thresholds never change mid-session
            self._pending_settings = settings
        else:
            self.analyzer.apply_settings(settings)
        logger.info(f"TrackerService: Analyzer settings reloaded ({settings})")

    # --- Lifecycle ---

    def start(self) -> bool:
        if self.state == TrackerState.RUNNING:
            logger.warning("TrackerService: start() ignored, already running")
            return False
        if self.state == TrackerState.PAUSED:
            return self.resume()

        # IDLE always means a fresh session: stop() and reset() leave the analyzer without a baseline
        self._apply_pending_settings()
        self.analyzer.reset()
        self.paused_ms = 0
        self._pause_started = None
        self.source_exhausted = False
        self.session_count += 1
        update_log_context("session_id", self.session_count)

        self.state = TrackerState.RUNNING
        update_log_context("phase", self.state.value)
        logger.info(f"TrackerService: Session {self.session_count} started (interval {self.interval_ms}ms)")
        self.bus.publish(SessionStartedEvent(session=self.session_count))
        return True

    def pause(self) -> bool:
        if self.state != TrackerState.RUNNING:
            logger.warning(f"TrackerService: pause() ignored in state {self.state.value}")
            return False
        self._pause_started = self.clock()
        self.state = TrackerState.PAUSED
        update_log_context("phase", self.state.value)
        self.bus.publish(SessionPausedEvent(paused=True))
        return True

    def resume(self) -> bool:
        if self.state != TrackerState.PAUSED:
            logger.warning(f"TrackerService: resume() ignored in state {self.state.value}")
            return False
        self._close_pause()
        self.state = TrackerState.RUNNING
        update_log_context("phase", self.state.value)
        self.bus.publish(SessionPausedEvent(paused=False))
        return True

    def stop(self) -> Optional[SessionRecord]:
        """Ends the session. Returns the record if one was stored."""
        if self.state == TrackerState.IDLE:
            logger.warning("TrackerService: stop() ignored, not running")
            return None
        self._close_pause()

        record = self.analyzer.stop()
        saved = False
        if record is not None:
            if self.config.get("skip_zero_exp_records", True) and record.exp.gained == 0:
                logger.info("TrackerService: Record not stored (no EXP gained)")
            else:
                saved = self.store.save_record(record)
                if saved:
                    self.bus.publish(SessionRecordedEvent(record=record))

        self.state = TrackerState.IDLE
        self.paused_ms = 0
        self.last_snapshot = None
        update_log_context("phase", self.state.value)
        self.bus.publish(SessionStoppedEvent(recorded=saved))
        self._apply_pending_settings()
        return record if saved else None

    def reset(self) -> None:
        """Clears the baseline without storing a record; the next tick starts over."""
        self.analyzer.reset()
        self.last_snapshot = None
        logger.info("TrackerService: Reset, baseline will be taken on next tick")

    # --- Ticking ---

    @property
    def interval_ms(self) -> int:
        return int(self.config.get("analysis_interval_ms", 1000))

    def tick(self) -> Optional[ResultSnapshot]:
        if self.state != TrackerState.RUNNING:
            return None

        try:
            reading = self.source.read()
        except Exception as e:
            logger.error(f"TrackerService: Reading source failed: {e}", exc_info=True)
            return None

        if reading is None:
            self.source_exhausted = True
            return None

        snapshot = self.analyzer.analyze(reading, self.paused_ms)
        self.last_snapshot = snapshot
        self.bus.publish(SnapshotEvent(snapshot=snapshot))
        if snapshot.is_level_up:
            self.bus.publish(LevelUpEvent(exp_value=snapshot.exp.current, percent=snapshot.exp.percent))
        return snapshot

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Blocking tick loop. Returns the number of ticks executed.
        Ends on shutdown(), source exhaustion or max_ticks.
        """
        ticks = 0
        while self.running:
            if self.state == TrackerState.RUNNING:
                self.tick()
                if self.source_exhausted:
                    logger.info("TrackerService: Reading source exhausted")
                    break
                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
            self.sleep(self.interval_ms / 1000)
        return ticks

    # --- Internals ---

    def _close_pause(self) -> None:
        if self._pause_started is not None:
            self.paused_ms += max(0, self.clock() - self._pause_started)
            self._pause_started = None

    def _apply_pending_settings(self) -> None:
        if self._pending_settings is not None:
            self.analyzer.apply_settings(self._pending_settings)
            self._pending_settings = None

    def get_debug_state(self) -> Dict[str, Any]:
        """Returns internal state for debugging/inspection."""
        return {
            "state": self.state.value,
            "session_count": self.session_count,
            "paused_ms": self.paused_ms,
            "analyzer": self.analyzer.get_debug_state(),
        }
