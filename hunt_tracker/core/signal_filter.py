from dataclasses import dataclass
from typing import Optional, Tuple

from hunt_tracker.core.reading import Reading, is_missing
from hunt_tracker.core.session import TrustedState
from hunt_tracker.core.settings import AnalyzerSettings
from hunt_tracker.logger import logger


@dataclass(frozen=True)
class FilterOutcome:
    """What the filter did with one Reading."""
    exp_rejected: bool = False
    percent_rejected: bool = False
    currency_rejected: bool = False
    currency_unstuck: bool = False


class SignalFilter:
    """
    Per-signal noise rejection for OCR readings.
    Pure Logic Layer: takes the previous trusted values and a raw Reading,
    returns the new trusted values. Never raises, never touches the baseline.

    - EXP: a single-tick jump outside [ratio_min, ratio_max] of the trusted
      value is a misread and is replaced by the trusted value.
    - Percent: a jump of more than percent_jump_limit points is a misread.
    - NaN and infinite readings count as missing.
    - Currency: sticky maximum. The balance does not drop while hunting, a lower
      reading means the readout is covered. A lower value sustained for
      currency_unstick_streak ticks replaces the maximum, unless it falls
      below the session's baseline.
    """

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def filter_exp(self, raw: Optional[int], last: Optional[int]) -> Tuple[Optional[int], bool]:
        if is_missing(raw):
            return last, False
        if last is None or last <= 0:
            return raw, False

        ratio = raw / last
        if ratio < self.settings.exp_ratio_min or ratio > self.settings.exp_ratio_max:
            return last, True
        return raw, False

    def filter_percent(self, raw: Optional[float], last: Optional[float]) -> Tuple[Optional[float], bool]:
        if is_missing(raw):
            return last, False
        if last is None:
            return raw, False
        if abs(raw - last) > self.settings.percent_jump_limit:
            return last, True
        return raw, False

    def filter_currency(self, raw: Optional[int], last: Optional[int], streak: int,
                        baseline: Optional[int]) -> Tuple[Optional[int], int, bool, bool]:
        """
        Returns (trusted value, reject streak, rejected, unstuck).
        Zero or missing readings leave the filter untouched.
        """
        if is_missing(raw) or raw <= 0:
            return last, streak, False, False

        if last is None or raw >= last:
            return raw, 0, False, False

        streak += 1
        if streak < self.settings.currency_unstick_streak:
            return last, streak, True, False

        # Sustained lower value: the old maximum was probably a misread spike.
        if baseline is not None and raw < baseline:
            return last, 0, True, False
        return raw, 0, False, True

    def apply(self, reading: Reading, trusted: TrustedState,
              baseline_currency: Optional[int] = None) -> Tuple[TrustedState, FilterOutcome]:
        exp, exp_rejected = self.filter_exp(reading.exp_value, trusted.last_exp)
        percent, percent_rejected = self.filter_percent(reading.percent, trusted.last_percent)
        currency, streak, currency_rejected, unstuck = self.filter_currency(
            reading.currency, trusted.last_currency, trusted.currency_reject_streak, baseline_currency
        )

        if exp_rejected:
            logger.debug(f"SignalFilter: EXP rejected {reading.exp_value} (trusted {trusted.last_exp})")
        if percent_rejected:
            logger.debug(f"SignalFilter: Percent rejected {reading.percent} (trusted {trusted.last_percent})")
        if currency_rejected:
            logger.debug(f"SignalFilter: Currency drop ignored {reading.currency} (trusted {trusted.last_currency}, streak {streak})")
        if unstuck:
            logger.info(f"SignalFilter: Currency maximum {trusted.last_currency} replaced by sustained {currency}")

        new_state = TrustedState(
            last_exp=exp,
            last_percent=percent,
            last_currency=currency,
            currency_reject_streak=streak,
        )
        return new_state, FilterOutcome(exp_rejected, percent_rejected, currency_rejected, unstuck)
