import math
import re
from dataclasses import dataclass
from typing import Optional

_DIGITS = re.compile(r'\d+')
_PERCENT = re.compile(r'(\d+\.?\d*)\s*%')
_DECIMAL = re.compile(r'(\d+\.\d+)')


@dataclass(frozen=True)
class Reading:
    """
    One tick of raw OCR output.
    Any field may be None (region not configured or nothing recognized).
    Values are NOT trusted: misread digits are expected.
    """
    exp_value: Optional[int] = None
    percent: Optional[float] = None
    currency: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Reading":
        return cls(
            exp_value=_to_int(data.get("exp")),
            percent=_to_float(data.get("percent")),
            currency=_to_int(data.get("currency")),
        )

    def to_dict(self) -> dict:
        return {"exp": self.exp_value, "percent": self.percent, "currency": self.currency}


def is_missing(value) -> bool:
    """None, NaN and infinities all mean nothing usable was read."""
    return value is None or (isinstance(value, float) and not math.isfinite(value))


def _to_int(value) -> Optional[int]:
    if is_missing(value):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return None if is_missing(number) else number


def parse_exp_text(text: str, currency: Optional[int] = None) -> Reading:
    """
    Parses the EXP bar text into a Reading.

    Accepted shapes (OCR output is rarely clean):
        "EXP 55289816 [19.79%]"
        "55289816 (19.79%)"
        "EXP 55289816 19.79%"

    The EXP value is the largest digit run. The percent is the number right
    before '%', falling back to the first decimal number under 100.
    """
    if not text:
        return Reading(currency=currency)

    exp_value = None
    numbers = _DIGITS.findall(text)
    if numbers:
        exp_value = max(int(n) for n in numbers)

    percent = None
    match = _PERCENT.search(text)
    if match:
        percent = float(match.group(1))
    else:
        match = _DECIMAL.search(text)
        if match and float(match.group(1)) < 100:
            percent = float(match.group(1))

    return Reading(exp_value=exp_value, percent=percent, currency=currency)


def parse_currency_text(text: str) -> Optional[int]:
    """'78,972,001' -> 78972001. Returns None when no digits survive."""
    if not text:
        return None
    clean = re.sub(r'[,\s]', '', text)
    match = _DIGITS.search(clean)
    return int(match.group(0)) if match else None
