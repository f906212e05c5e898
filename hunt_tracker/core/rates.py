from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from hunt_tracker.core.reading import is_missing
from hunt_tracker.core.session import Baseline, TrustedState

MS_PER_HOUR = 3_600_000


@dataclass
class ExpResult:
    current: Optional[int] = None
    percent: Optional[float] = None
    change: Optional[int] = None
    percent_change: Optional[float] = None
    per_hour: Optional[int] = None
    total_required: Optional[int] = None
    remaining: Optional[int] = None
    time_to_level: Optional[float] = None  # ms; None means unknown, never zero


@dataclass
class CurrencyResult:
    current: Optional[int] = None
    change: Optional[int] = None
    per_hour: Optional[int] = None


@dataclass
class ResultSnapshot:
    """Derived metrics for one tick. Recomputed every tick, never persisted directly."""
    exp: ExpResult = field(default_factory=ExpResult)
    currency: CurrencyResult = field(default_factory=CurrencyResult)
    elapsed: int = 0  # active ms, paused time excluded
    is_level_up: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RateCalculator:
    """
    Change, per-hour rate and ETA from (Baseline, TrustedState, elapsed).
    Every output whose inputs are missing stays None. Never raises.
    """

    @staticmethod
    def per_hour(change: Optional[int], elapsed_ms: int) -> Optional[int]:
        if is_missing(change) or elapsed_ms <= 0:
            return None
        return round(change / (elapsed_ms / MS_PER_HOUR))

    @staticmethod
    def total_required(value: Optional[int], percent: Optional[float]) -> Optional[int]:
        """Full level requirement inferred from the value/percent pair."""
        if is_missing(value) or is_missing(percent) or percent <= 0:
            return None
        return round(value / (percent / 100))

    @staticmethod
    def time_to_level(remaining: Optional[int], per_hour: Optional[int]) -> Optional[float]:
        if remaining is None or per_hour is None or per_hour <= 0 or remaining < 0:
            return None
        return (remaining / per_hour) * MS_PER_HOUR

    @classmethod
    def compute(cls, baseline: Baseline, trusted: TrustedState, elapsed_ms: int) -> ResultSnapshot:
        snapshot = ResultSnapshot(elapsed=max(0, elapsed_ms))
        exp = snapshot.exp

        exp.current = trusted.last_exp
        exp.percent = trusted.last_percent
        if trusted.last_exp is not None and baseline.exp_value is not None:
            exp.change = trusted.last_exp - baseline.exp_value
            exp.per_hour = cls.per_hour(exp.change, elapsed_ms)
        if trusted.last_percent is not None and baseline.percent is not None:
            exp.percent_change = trusted.last_percent - baseline.percent

        exp.total_required = cls.total_required(trusted.last_exp, trusted.last_percent)
        if exp.total_required is not None:
            exp.remaining = exp.total_required - trusted.last_exp
            exp.time_to_level = cls.time_to_level(exp.remaining, exp.per_hour)

        currency = snapshot.currency
        currency.current = trusted.last_currency
        if trusted.last_currency is not None and baseline.currency is not None:
            currency.change = trusted.last_currency - baseline.currency
            currency.per_hour = cls.per_hour(currency.change, elapsed_ms)

        return snapshot
