"""
Client for the review endpoints, plus the per-restaurant review panel.

The panel never trusts its cached liked-set across refreshes: every
``refresh()`` re-asks the server, review by review, whether the current
user liked it.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..errors import (
    ConflictError,
    MoodFoodError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ..reviews.models import Review

logger = logging.getLogger(__name__)


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


_ERRORS_BY_STATUS: dict[int, type[MoodFoodError]] = {
    400: ValidationError,
    404: NotFoundError,
    409: ConflictError,
}


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        message = response.json().get("error") or response.reason_phrase
    except (ValueError, AttributeError):
        message = response.reason_phrase
    error_cls = _ERRORS_BY_STATUS.get(response.status_code, UpstreamError)
    raise error_cls(message)


class ReviewsClient:
    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def _send(self, method: str, url: str, json: dict[str, Any] | None = None) -> dict:
        try:
            response = self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise UpstreamError("Could not reach the review service") from exc
        _raise_for_error(response)
        return response.json()

    def create_review(
        self, restaurant_id: str, user_name: str, rating: int, comment: str,
    ) -> Review:
        body = self._send("POST", "/reviews", json={
            "restaurantId": restaurant_id,
            "userName": user_name,
            "rating": rating,
            "comment": comment,
        })
        return Review.model_validate(body["review"])

    def list_reviews(self, restaurant_id: str) -> list[Review]:
        body = self._send("GET", f"/reviews/{_segment(restaurant_id)}")
        return [Review.model_validate(r) for r in body.get("reviews", [])]

    def like(self, review_id: str, user_name: str) -> int:
        return self._send("POST", f"/reviews/{_segment(review_id)}/like", json={"userName": user_name})["likes"]

    def unlike(self, review_id: str, user_name: str) -> int:
        return self._send("DELETE", f"/reviews/{_segment(review_id)}/like", json={"userName": user_name})["likes"]

    def has_liked(self, review_id: str, user_name: str) -> bool:
        return bool(self._send("GET", f"/reviews/{_segment(review_id)}/liked/{_segment(user_name)}")["liked"])


class ReviewPanel:
    def __init__(self, client: ReviewsClient, restaurant_id: str, user_name: str) -> None:
        self.client = client
        self.restaurant_id = str(restaurant_id)
        self.user_name = user_name
        self.reviews: list[Review] = []
        self.liked: set[str] = set()
        self.loading = True
        self.error: str | None = None

    def refresh(self) -> list[Review]:
        self.error = None
        try:
            reviews = self.client.list_reviews(self.restaurant_id)
            liked = {r.id for r in reviews if self.client.has_liked(r.id, self.user_name)}
        except MoodFoodError as exc:
            logger.warning("Error fetching reviews for %s: %s", self.restaurant_id, exc.message)
            self.error = exc.message
        else:
            self.reviews = reviews
            self.liked = liked
        finally:
            self.loading = False
        return self.reviews

    def _set_likes(self, review_id: str, likes: int) -> None:
        self.reviews = [
            r.model_copy(update={"likes": likes}) if r.id == review_id else r
            for r in self.reviews
        ]

    def toggle_like(self, review_id: str) -> None:
        self.error = None
        was_liked = review_id in self.liked
        try:
            if was_liked:
                likes = self.client.unlike(review_id, self.user_name)
            else:
                likes = self.client.like(review_id, self.user_name)
        except ConflictError:
            # Liked elsewhere already; adopt the server's view.
            self.liked.add(review_id)
            return
        except MoodFoodError as exc:
            logger.warning("Error toggling like on %s: %s", review_id, exc.message)
            self.error = exc.message
            return

        if was_liked:
            self.liked.discard(review_id)
        else:
            self.liked.add(review_id)
        self._set_likes(review_id, likes)

    def submit_review(self, rating: int, comment: str) -> Review | None:
        self.error = None
        try:
            review = self.client.create_review(self.restaurant_id, self.user_name, rating, comment)
        except MoodFoodError as exc:
            logger.warning("Error submitting review: %s", exc.message)
            self.error = exc.message
            return None
        self.refresh()
        return review
