from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class AnalyzerSettings:
    """Thresholds of the noise filters, level-up detector and record builder."""
    exp_ratio_min: float = 0.5
    exp_ratio_max: float = 2.0
    percent_jump_limit: float = 10.0
    currency_unstick_streak: int = 5
    level_up_percent_drop: float = 50.0
    min_record_seconds: int = 10

    @classmethod
    def from_config(cls, config: Any) -> "AnalyzerSettings":
        """Reads the 'analyzer' section of a config service (unknown keys ignored)."""
        section = config.get("analyzer", {}) or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known})
