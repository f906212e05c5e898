from dataclasses import dataclass
from typing import Optional

from hunt_tracker.core.reading import Reading, is_missing


def _usable(value):
    return None if is_missing(value) else value


def _positive(value):
    return value if not is_missing(value) and value > 0 else None


@dataclass
class Baseline:
    """
    Reference values a session's deltas are measured against.
    started_at is None exactly when the session is idle.
    """
    exp_value: Optional[int] = None
    percent: Optional[float] = None
    currency: Optional[int] = None
    started_at: Optional[int] = None  # epoch ms
    paused_offset_ms: int = 0  # caller's cumulative paused_ms when this baseline was taken

    @classmethod
    def from_reading(cls, reading: Reading, now_ms: int, paused_ms: int = 0) -> "Baseline":
        return cls(
            exp_value=_usable(reading.exp_value),
            percent=_usable(reading.percent),
            currency=_positive(reading.currency),
            started_at=now_ms,
            paused_offset_ms=paused_ms,
        )


@dataclass
class TrustedState:
    """
    Best known truth, as opposed to the raw Reading.
    currency_reject_streak counts consecutive rejected currency readings
    and is 0 whenever a currency reading is accepted.
    """
    last_exp: Optional[int] = None
    last_percent: Optional[float] = None
    last_currency: Optional[int] = None
    currency_reject_streak: int = 0

    @classmethod
    def from_reading(cls, reading: Reading) -> "TrustedState":
        return cls(
            last_exp=_usable(reading.exp_value),
            last_percent=_usable(reading.percent),
            last_currency=_positive(reading.currency),
        )


class HuntSession:
    """
    All volatile state of one tracked target.
    Reset as a whole when a session ends or the user resets.
    """

    def __init__(self):
        self.baseline = Baseline()
        self.trusted = TrustedState()

    @property
    def is_started(self) -> bool:
        return self.baseline.started_at is not None

    def begin(self, reading: Reading, now_ms: int, paused_ms: int = 0) -> None:
        self.baseline = Baseline.from_reading(reading, now_ms, paused_ms)
        self.trusted = TrustedState.from_reading(reading)

    def clear(self) -> None:
        self.baseline = Baseline()
        self.trusted = TrustedState()

    def elapsed_active_ms(self, now_ms: int, paused_ms: int = 0) -> int:
        """Wall-clock time since baseline minus pause accrued since baseline."""
        if self.baseline.started_at is None:
            return 0
        paused_since_start = max(0, paused_ms - self.baseline.paused_offset_ms)
        return max(0, now_ms - self.baseline.started_at - paused_since_start)

    def to_dict(self):
        """Debug dump"""
        return {
            "started_at": self.baseline.started_at,
            "base_exp": self.baseline.exp_value,
            "base_currency": self.baseline.currency,
            "exp": self.trusted.last_exp,
            "percent": self.trusted.last_percent,
            "currency": self.trusted.last_currency,
            "currency_streak": self.trusted.currency_reject_streak,
        }
