"""
Review and like records on top of the flat key-value store.

Key layout:
- ``review:<reviewId>``                    -> review record
- ``restaurant_reviews:<restaurantId>``    -> ordered list of review ids
- ``review_like:<reviewId>:<userName>``    -> like record (presence = liked)

Like counts are never read from the review record; they are recounted from
the like records every time they are reported.
"""
from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from ..errors import ConflictError, NotFoundError, ValidationError
from ..storage.kv import KVStore, get_kv_store
from .models import Review

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LEN = 9


def _review_key(review_id: str) -> str:
    return f"review:{review_id}"


def _index_key(restaurant_id: str) -> str:
    return f"restaurant_reviews:{restaurant_id}"


def _like_prefix(review_id: str) -> str:
    return f"review_like:{review_id}:"


def _like_key(review_id: str, user_name: str) -> str:
    return f"{_like_prefix(review_id)}{user_name}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(value: Any, field: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required")
    return text


class ReviewStore:
    def __init__(
        self,
        kv: KVStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._kv = kv
        self._clock = clock

    # ── Reviews ──────────────────────────────────────────────────────────

    def _new_review_id(self, restaurant_id: str, created_at: datetime) -> str:
        millis = int(created_at.timestamp() * 1000)
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
        return f"{restaurant_id}_{millis}_{suffix}"

    def create_review(
        self,
        restaurant_id: Any,
        user_name: str | None,
        rating: int | None,
        comment: str | None,
    ) -> Review:
        restaurant_id = _require_text(restaurant_id, "restaurantId")
        user_name = _require_text(user_name, "userName")
        if not rating:
            raise ValidationError("Please choose a star rating")
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be a whole number from 1 to 5")
        comment = _require_text(comment, "comment")

        created_at = self._clock()
        review = Review(
            id=self._new_review_id(restaurant_id, created_at),
            restaurant_id=restaurant_id,
            user_name=user_name,
            rating=rating,
            comment=comment,
            created_at=created_at,
            likes=0,
        )
        self._kv.set(_review_key(review.id), review.model_dump(mode="json", by_alias=True))

        # Read-modify-write; concurrent creates for one restaurant can lose an id.
        index = self._kv.get(_index_key(restaurant_id)) or []
        index.append(review.id)
        self._kv.set(_index_key(restaurant_id), index)

        logger.info("Review created: %s for restaurant %s", review.id, restaurant_id)
        return review

    def _load_review(self, review_id: str) -> Review | None:
        raw = self._kv.get(_review_key(review_id))
        if raw is None:
            logger.debug("Skipping missing review %s", review_id)
            return None
        try:
            review = Review.model_validate(raw)
        except PydanticValidationError:
            logger.warning("Skipping corrupt review record %s", review_id, exc_info=True)
            return None
        return review.model_copy(update={"likes": self.count_likes(review_id)})

    def get_review(self, review_id: str) -> Review:
        review = self._load_review(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        return review

    def list_reviews(self, restaurant_id: Any) -> list[Review]:
        """Return the restaurant's reviews, newest first, with fresh like counts."""
        restaurant_id = str(restaurant_id).strip()
        review_ids = self._kv.get(_index_key(restaurant_id)) or []

        # Index order breaks ties between reviews created in the same millisecond.
        loaded: list[tuple[int, Review]] = []
        for position, review_id in enumerate(review_ids):
            review = self._load_review(review_id)
            if review is not None:
                loaded.append((position, review))

        loaded.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        reviews = [review for _, review in loaded]
        logger.info("Retrieved %d reviews for restaurant %s", len(reviews), restaurant_id)
        return reviews

    # ── Likes ────────────────────────────────────────────────────────────

    def count_likes(self, review_id: str) -> int:
        return len(self._kv.get_by_prefix(_like_prefix(review_id)))

    def has_liked(self, review_id: str, user_name: str | None) -> bool:
        user_name = "" if user_name is None else str(user_name).strip()
        if not user_name:
            return False
        return self._kv.get(_like_key(review_id, user_name)) is not None

    def like_review(self, review_id: str, user_name: str | None) -> int:
        """Record a like and return the new count.

        A second like by the same user is rejected with ``ConflictError``.
        The guarantee is only as strong as the backend's ``set_if_absent``.
        """
        user_name = _require_text(user_name, "userName")
        if self._kv.get(_review_key(review_id)) is None:
            raise NotFoundError("Review not found")

        record = {"userName": user_name, "likedAt": self._clock().isoformat()}
        if not self._kv.set_if_absent(_like_key(review_id, user_name), record):
            raise ConflictError("Already liked this review")

        likes = self.count_likes(review_id)
        logger.info("User %s liked review %s", user_name, review_id)
        return likes

    def unlike_review(self, review_id: str, user_name: str | None) -> int:
        user_name = _require_text(user_name, "userName")
        self._kv.delete(_like_key(review_id, user_name))
        likes = self.count_likes(review_id)
        logger.info("User %s unliked review %s", user_name, review_id)
        return likes


_review_store: ReviewStore | None = None


def get_review_store() -> ReviewStore:
    global _review_store
    if _review_store is None:
        _review_store = ReviewStore(get_kv_store())
    return _review_store
