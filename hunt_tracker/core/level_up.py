from typing import Optional

from hunt_tracker.core.reading import Reading, is_missing
from hunt_tracker.core.session import TrustedState


class LevelUpDetector:
    """
    A level-up wraps the percent from ~100% back to a fresh value, far more than
    any OCR noise. To tell it apart from a single garbled percent, the EXP value
    must wrap too (lower than the trusted EXP) whenever both EXP values are known.
    """

    def __init__(self, percent_drop: float = 50.0):
        self.percent_drop = percent_drop

    def is_level_up(self, trusted: TrustedState, reading: Reading) -> bool:
        previous: Optional[float] = trusted.last_percent
        if is_missing(previous) or is_missing(reading.percent):
            return False
        if previous - reading.percent <= self.percent_drop:
            return False

        if is_missing(trusted.last_exp) or is_missing(reading.exp_value):
            return True
        return reading.exp_value < trusted.last_exp
