from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from moodfood.errors import ConflictError, NotFoundError, ValidationError
from moodfood.reviews.store import ReviewStore
from moodfood.storage.kv import InMemoryKVStore


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def _store() -> tuple[ReviewStore, InMemoryKVStore]:
    kv = InMemoryKVStore()
    return ReviewStore(kv, clock=_Clock()), kv


# ── createReview ─────────────────────────────────────────────────────────


def test_create_then_list_round_trip():
    store, _ = _store()
    created = store.create_review("42", "alice", 4, "Great kimchi stew")

    reviews = store.list_reviews("42")
    assert len(reviews) == 1
    assert reviews[0].id == created.id
    assert reviews[0].rating == 4
    assert reviews[0].comment == "Great kimchi stew"
    assert reviews[0].likes == 0


def test_review_id_embeds_restaurant_and_is_unique():
    store, _ = _store()
    a = store.create_review("42", "alice", 5, "one")
    b = store.create_review("42", "alice", 5, "two")
    assert a.id.startswith("42_")
    assert a.id != b.id


def test_same_user_can_review_twice():
    store, _ = _store()
    store.create_review("42", "alice", 5, "first visit")
    store.create_review("42", "alice", 2, "second visit")
    assert len(store.list_reviews("42")) == 2


@pytest.mark.parametrize("rating", [None, 0])
def test_missing_rating_rejected_without_mutation(rating):
    store, kv = _store()
    with pytest.raises(ValidationError):
        store.create_review("42", "alice", rating, "tasty")
    assert len(kv) == 0


@pytest.mark.parametrize("rating", [6, -1])
def test_out_of_range_rating_rejected(rating):
    store, kv = _store()
    with pytest.raises(ValidationError):
        store.create_review("42", "alice", rating, "tasty")
    assert len(kv) == 0


@pytest.mark.parametrize("comment", ["", "   ", None])
def test_blank_comment_rejected(comment):
    store, kv = _store()
    with pytest.raises(ValidationError):
        store.create_review("42", "alice", 3, comment)
    assert len(kv) == 0


def test_blank_user_rejected():
    store, _ = _store()
    with pytest.raises(ValidationError):
        store.create_review("42", " ", 3, "ok")


# ── listReviews ──────────────────────────────────────────────────────────


def test_list_is_newest_first():
    store, _ = _store()
    first = store.create_review("42", "alice", 3, "older")
    second = store.create_review("42", "bob", 5, "newer")
    assert [r.id for r in store.list_reviews("42")] == [second.id, first.id]


def test_same_millisecond_reviews_newest_first():
    stamp = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)
    store = ReviewStore(InMemoryKVStore(), clock=lambda: stamp)
    first = store.create_review("42", "alice", 3, "first")
    second = store.create_review("42", "bob", 4, "second")
    third = store.create_review("42", "carol", 5, "third")
    assert [r.id for r in store.list_reviews("42")] == [third.id, second.id, first.id]


def test_list_unknown_restaurant_is_empty():
    store, _ = _store()
    assert store.list_reviews("nope") == []


def test_list_skips_ids_with_missing_records():
    store, kv = _store()
    kept = store.create_review("42", "alice", 3, "kept")
    lost = store.create_review("42", "bob", 3, "lost")
    kv.delete(f"review:{lost.id}")

    assert [r.id for r in store.list_reviews("42")] == [kept.id]


def test_list_skips_corrupt_records():
    store, kv = _store()
    kept = store.create_review("42", "alice", 3, "kept")
    kv.set("restaurant_reviews:42", [kept.id, "broken"])
    kv.set("review:broken", {"id": "broken", "rating": "lots"})

    assert [r.id for r in store.list_reviews("42")] == [kept.id]


def test_list_recounts_likes_ignoring_stored_count():
    store, kv = _store()
    review = store.create_review("42", "alice", 3, "ok")
    raw = kv.get(f"review:{review.id}")
    raw["likes"] = 99
    kv.set(f"review:{review.id}", raw)
    store.like_review(review.id, "bob")

    assert store.list_reviews("42")[0].likes == 1


def test_reviews_are_scoped_to_their_restaurant():
    store, _ = _store()
    store.create_review("1", "alice", 3, "one")
    store.create_review("10", "alice", 3, "ten")
    assert len(store.list_reviews("1")) == 1


# ── Likes ────────────────────────────────────────────────────────────────


def test_like_returns_derived_count():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    assert store.like_review(review.id, "bob") == 1
    assert store.like_review(review.id, "carol") == 2


def test_duplicate_like_conflicts_and_keeps_count():
    store, _ = _store()
    review = store.create_review("r", "alice", 3, "ok")
    assert store.like_review(review.id, "alice") == 1

    with pytest.raises(ConflictError):
        store.like_review(review.id, "alice")

    assert store.list_reviews("r")[0].likes == 1


def test_like_missing_review_not_found():
    store, _ = _store()
    with pytest.raises(NotFoundError):
        store.like_review("ghost", "alice")


def test_unlike_twice_is_idempotent():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    store.like_review(review.id, "bob")
    store.like_review(review.id, "carol")

    once = store.unlike_review(review.id, "bob")
    twice = store.unlike_review(review.id, "bob")
    assert once == twice == 1


def test_unlike_without_like_is_not_an_error():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    assert store.unlike_review(review.id, "bob") == 0


def test_has_liked_tracks_like_and_unlike():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    assert store.has_liked(review.id, "bob") is False
    store.like_review(review.id, "bob")
    assert store.has_liked(review.id, "bob") is True
    store.unlike_review(review.id, "bob")
    assert store.has_liked(review.id, "bob") is False


def test_like_after_unlike_is_allowed():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    store.like_review(review.id, "bob")
    store.unlike_review(review.id, "bob")
    assert store.like_review(review.id, "bob") == 1


def test_has_liked_trims_user_name():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    store.like_review(review.id, " bob ")
    assert store.has_liked(review.id, " bob ") is True
    assert store.has_liked(review.id, "bob") is True
    store.unlike_review(review.id, "bob ")
    assert store.has_liked(review.id, " bob ") is False


def test_has_liked_blank_user_is_false():
    store, _ = _store()
    review = store.create_review("42", "alice", 3, "ok")
    assert store.has_liked(review.id, "   ") is False
