"""Schemas for rating endpoints."""
from typing import List, Optional

from pydantic import BaseModel


class VoteResponseSchema(BaseModel):
    """Successful vote submission."""
    status: str = "ok"


class RatingViewSchema(BaseModel):
    """Render data of one item."""
    item_id: int
    name: str
    vote_count: int
    mean_value: float
    current_value: float
    rating_max: float
    allow_half_steps: bool
    rating_disabled: bool
    options: List[float]


class RatingListResponseSchema(BaseModel):
    """Render data for a set of items."""
    model_id: int
    attribute_id: int
    items: List[RatingViewSchema]


class SortedIdsResponseSchema(BaseModel):
    """Item ids ordered by rating."""
    direction: str
    item_ids: List[int]


class ClearResponseSchema(BaseModel):
    """Result of a delete request."""
    status: str = "ok"
    item_ids: Optional[List[int]] = None
