"""Data Transfer Objects for rating render data and vote responses."""
from dataclasses import dataclass, field
from typing import List


@dataclass
class RatingViewDTO:
    """Everything a front end needs to draw the rating widget of one item."""
    item_id: int
    name: str
    vote_count: int
    mean_value: float
    current_value: float
    rating_max: float
    allow_half_steps: bool
    rating_disabled: bool
    options: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class VoteResponse:
    """Success/failure signal of a vote submission."""
    status_code: int
    message: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200
