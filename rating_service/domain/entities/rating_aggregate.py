"""RatingAggregate domain entity - vote count and normalized running mean."""
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class RatingAggregate:
    """Per-item vote statistics for one (model, attribute) pair.

    ``mean_value`` is stored as a fraction of the attribute's ``rating_max``
    so aggregates stay comparable across attributes with different scales.
    """
    model_id: int
    attribute_id: int
    item_id: int
    vote_count: int = 0
    mean_value: float = 0.0

    def __post_init__(self):
        if self.vote_count < 0:
            raise ValueError(f"Vote count cannot be negative, got {self.vote_count}")
        if self.vote_count == 0 and self.mean_value != 0:
            raise ValueError("An aggregate without votes must have a zero mean")

    @classmethod
    def zero(cls, model_id: int, attribute_id: int, item_id: int) -> "RatingAggregate":
        """Aggregate of an item nobody voted on yet."""
        return cls(model_id=model_id, attribute_id=attribute_id, item_id=item_id)

    @property
    def is_rated(self) -> bool:
        return self.vote_count > 0

    def with_vote(self, raw_value: float, rating_max: float) -> "RatingAggregate":
        """Fold one raw vote into the running mean.

        The prior normalized votes are scaled back to a grand total, the raw
        vote is added and the sum is normalized against the new vote count.
        """
        vote_count = self.vote_count + 1
        grand_total = self.vote_count * rating_max * self.mean_value
        hundred = rating_max * vote_count
        return RatingAggregate(
            model_id=self.model_id,
            attribute_id=self.attribute_id,
            item_id=self.item_id,
            vote_count=vote_count,
            mean_value=(grand_total + raw_value) / hundred,
        )

    def star_value(self, rating_max: float) -> float:
        """Mean expressed on the attribute's own scale."""
        return rating_max * self.mean_value

    def display_value(self, rating_max: float) -> float:
        """Star value rounded to the nearest half step."""
        return math.floor(self.star_value(rating_max) / .5 + .5) * .5

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "item_id": self.item_id,
            "vote_count": self.vote_count,
            "mean_value": self.mean_value,
        }
