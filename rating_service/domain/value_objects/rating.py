"""Rating configuration value objects - immutable and validated."""
from dataclasses import dataclass
from enum import Enum
from typing import List

from rating_service.core.exceptions import ConfigurationError, ValidationError


class SortDirection(str, Enum):
    """Sort direction, as in plain SQL."""
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: str) -> "SortDirection":
        """Parse a direction string case-insensitively."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Sort direction must be ASC or DESC, got {value!r}", field="direction")


@dataclass(frozen=True)
class RatingConfig:
    """Immutable attribute-level rating configuration."""
    rating_max: float
    allow_half_steps: bool = False
    sortable: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if self.rating_max is None or self.rating_max <= 0:
            raise ConfigurationError(
                f"rating_max must be greater than 0, got {self.rating_max}",
                details={"rating_max": self.rating_max},
            )

    @property
    def step(self) -> float:
        return 0.5 if self.allow_half_steps else 1.0

    def vote_options(self) -> List[float]:
        """Selectable vote values from one step up to rating_max inclusive."""
        options = []
        value = self.step
        while value <= self.rating_max:
            options.append(value)
            value += self.step
        return options

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "rating_max": self.rating_max,
            "allow_half_steps": self.allow_half_steps,
            "sortable": self.sortable,
        }
