from pydantic import Field
from typing import Dict, Optional
from datetime import datetime

from .base_schema import CamelModel


class ReviewCreate(CamelModel):
    rating: int = Field(ge=1, le=5, strict=True)
    comment: str = Field(min_length=1, max_length=1000)


class Reviewer(CamelModel):
    # Reviews are public, so the reviewer's contact is left out
    id: int
    name: str
    username: str


class ReviewResponse(CamelModel):
    id: int
    kos_id: int
    user_id: int
    rating: int
    comment: str
    user: Optional[Reviewer] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewStatistics(CamelModel):
    average_rating: float
    total_reviews: int
    # Star value ("1".."5") -> number of reviews
    rating_distribution: Dict[str, int]
