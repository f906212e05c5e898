import argparse
import sys

from hunt_tracker.core.events import EventBus, LevelUpEvent, SnapshotEvent
from hunt_tracker.core.formatting import (
    format_elapsed, format_number, format_change, format_time_estimate, format_compact, format_duration
)
from hunt_tracker.service_container import ServiceContainer
from hunt_tracker.services.base_service import IConfigService, IReadingSource, IRecordStore, ITrackerService
from hunt_tracker.services.config_service import ConfigService
from hunt_tracker.services.database_service import DatabaseService
from hunt_tracker.services.replay_source import ReplayReadingSource
from hunt_tracker.services.tracker_service import TrackerService
from hunt_tracker.logger import logger


class Launcher:
    """Headless launcher: replays a recorded reading log through the tracker."""

    def __init__(self, args):
        self.args = args
        self.container = ServiceContainer()
        self.bus = EventBus()

    def setup_services(self) -> None:
        config = ConfigService(self.args.config)
        config.load()
        db_path = self.args.db or config.get("db_path")
        store = DatabaseService(db_path, history_limit=config.get("history_limit", 100))
        source = ReplayReadingSource(self.args.replay)
        # Recorded time, no real waiting between ticks
        tracker = TrackerService(config, source, store, bus=self.bus,
                                 clock=source.clock, sleep=lambda _: None)

        self.container.register(IConfigService, config)
        self.container.register(IRecordStore, store)
        self.container.register(IReadingSource, source)
        self.container.register(ITrackerService, tracker)

        self.bus.subscribe(SnapshotEvent, self.on_snapshot)
        self.bus.subscribe(LevelUpEvent, self.on_level_up)

    def on_snapshot(self, event: SnapshotEvent) -> None:
        if self.args.quiet: return
        s = event.snapshot
        print(f"[{format_elapsed(s.elapsed)}] "
              f"EXP {format_number(s.exp.current)} ({format_change(s.exp.change)}, "
              f"{format_number(s.exp.per_hour)}/h, ETA {format_time_estimate(s.exp.time_to_level)}) | "
              f"Currency {format_number(s.currency.current)} ({format_change(s.currency.change)}, "
              f"{format_number(s.currency.per_hour)}/h)")

    def on_level_up(self, event: LevelUpEvent) -> None:
        print(f"*** Level up! Tracking restarted at {format_number(event.exp_value)} ({event.percent}%)")

    def run(self) -> int:
        self.setup_services()
        if not self.container.initialize_all():
            logger.error("Launcher: Service initialization failed")
            self.container.shutdown_all()
            return 1

        tracker = self.container.resolve(ITrackerService)
        store = self.container.resolve(IRecordStore)
        try:
            tracker.start()
            tracker.run(max_ticks=self.args.max_ticks)
            record = tracker.stop()
        finally:
            self.container.shutdown_all()

        if record is None:
            print("No record stored (session too short or no EXP gained).")
            return 0

        print(f"Recorded {record.start_time} -> {record.end_time} ({format_duration(record.duration_seconds)}): "
              f"EXP {format_compact(record.exp.gained)} ({format_compact(record.exp.per_hour)}/h), "
              f"Currency {format_compact(record.currency.gained)} ({format_compact(record.currency.per_hour)}/h)")
        return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Replay a recorded EXP/currency reading log.")
    parser.add_argument("--replay", required=True, help="JSONL reading log")
    parser.add_argument("--config", default="config.json", help="Configuration file")
    parser.add_argument("--db", default=None, help="Record database (defaults to config db_path)")
    parser.add_argument("--max-ticks", type=int, default=None, help="Stop after N ticks")
    parser.add_argument("--quiet", action="store_true", help="Only print the final record")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    return Launcher(parse_args(argv)).run()


if __name__ == "__main__":
    sys.exit(main())
