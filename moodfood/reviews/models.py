from __future__ import annotations

from datetime import datetime

from pydantic import Field

from ..recommendations.models import CamelModel


class Review(CamelModel):
    id: str
    restaurant_id: str
    user_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str
    created_at: datetime
    # Derived on every read from the like records; the stored value is ignored.
    likes: int = 0


class ReviewCreate(CamelModel):
    # Kept permissive so the store, not the parser, reports missing fields.
    restaurant_id: str | int | None = None
    user_name: str | None = None
    rating: int | None = None
    comment: str | None = None


class LikeRequest(CamelModel):
    user_name: str | None = None


class ReviewCreated(CamelModel):
    success: bool = True
    review: Review


class ReviewList(CamelModel):
    success: bool = True
    reviews: list[Review]


class LikeCount(CamelModel):
    success: bool = True
    likes: int


class LikedStatus(CamelModel):
    success: bool = True
    liked: bool
