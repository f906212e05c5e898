import uuid
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from hunt_tracker.core.formatting import format_datetime
from hunt_tracker.core.rates import ResultSnapshot
from hunt_tracker.core.session import Baseline
from hunt_tracker.logger import logger


@dataclass
class RecordStats:
    start: Optional[int] = None
    end: Optional[int] = None
    gained: int = 0
    per_hour: int = 0


@dataclass
class SessionRecord:
    """
    Persisted summary of one hunting session.
    Created once at stop time; only 'memo' is edited afterwards (by the store).
    """
    id: str
    started_at: int  # epoch ms
    ended_at: int
    start_time: str
    end_time: str
    duration_seconds: int
    exp: RecordStats = field(default_factory=RecordStats)
    currency: RecordStats = field(default_factory=RecordStats)
    memo: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        return cls(
            id=data["id"],
            started_at=data["started_at"],
            ended_at=data["ended_at"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            duration_seconds=data["duration_seconds"],
            exp=RecordStats(**data.get("exp", {})),
            currency=RecordStats(**data.get("currency", {})),
            memo=data.get("memo", "") or "",
        )


def build_session_record(baseline: Baseline, snapshot: ResultSnapshot, now_ms: int,
                         min_seconds: int = 10) -> Optional[SessionRecord]:
    """
    Snapshot -> SessionRecord at session stop.
    Returns None (not an error) when no session is active or it lasted less than min_seconds.
    """
    if baseline.started_at is None:
        logger.info("Session record skipped: no active session")
        return None

    duration_seconds = (now_ms - baseline.started_at) // 1000
    if duration_seconds < min_seconds:
        logger.info(f"Session record skipped: {duration_seconds}s < {min_seconds}s")
        return None

    record = SessionRecord(
        id=uuid.uuid4().hex,
        started_at=baseline.started_at,
        ended_at=now_ms,
        start_time=format_datetime(baseline.started_at),
        end_time=format_datetime(now_ms),
        duration_seconds=duration_seconds,
        exp=RecordStats(
            start=baseline.exp_value,
            end=snapshot.exp.current,
            gained=snapshot.exp.change or 0,
            per_hour=snapshot.exp.per_hour or 0,
        ),
        currency=RecordStats(
            start=baseline.currency,
            end=snapshot.currency.current,
            gained=snapshot.currency.change or 0,
            per_hour=snapshot.currency.per_hour or 0,
        ),
    )
    logger.info(f"Session record created: {record.id} ({duration_seconds}s)", extra={"data": record.to_dict()})
    return record
