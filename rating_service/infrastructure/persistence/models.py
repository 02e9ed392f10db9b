"""SQLAlchemy models for rating aggregates and rating attribute configuration."""
from sqlalchemy import (
    Column,
    Integer,
    Boolean,
    Float,
    CheckConstraint,
)

from rating_service.infrastructure.persistence.db import Base


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("vote_count >= 0", name="ck_ratings_vote_count"),
    )

    model_id = Column(Integer, primary_key=True, autoincrement=False)
    attribute_id = Column(Integer, primary_key=True, autoincrement=False)
    item_id = Column(Integer, primary_key=True, autoincrement=False)
    vote_count = Column(Integer, nullable=False, default=0)
    # Fraction of the attribute's rating_max
    mean_value = Column(Float(53), nullable=False, default=0.0)


class RatingAttribute(Base):
    __tablename__ = "rating_attributes"

    model_id = Column(Integer, primary_key=True, autoincrement=False)
    attribute_id = Column(Integer, primary_key=True, autoincrement=False)
    rating_max = Column(Float, nullable=False, default=5.0)
    allow_half_steps = Column(Boolean, nullable=False, default=False)
    sortable = Column(Boolean, nullable=False, default=False)
