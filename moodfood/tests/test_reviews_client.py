from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from moodfood.app import app
from moodfood.client.reviews import ReviewPanel, ReviewsClient
from moodfood.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from moodfood.storage.kv import get_kv_store

http = TestClient(app)


def _client() -> ReviewsClient:
    get_kv_store().clear()
    return ReviewsClient(http)


def test_client_round_trip():
    client = _client()
    created = client.create_review("42", "alice", 5, "최고")
    reviews = client.list_reviews("42")
    assert [r.id for r in reviews] == [created.id]
    assert reviews[0].likes == 0


def test_client_maps_errors():
    client = _client()
    with pytest.raises(ValidationError):
        client.create_review("42", "alice", 0, "x")
    with pytest.raises(NotFoundError):
        client.like("ghost", "alice")

    review = client.create_review("42", "alice", 4, "ok")
    client.like(review.id, "alice")
    with pytest.raises(ConflictError):
        client.like(review.id, "alice")


def test_client_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ReviewsClient(httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://x"))
    with pytest.raises(UpstreamError):
        client.list_reviews("42")


def test_client_escapes_path_segments():
    paths = []

    def handler(request):
        paths.append(request.url.raw_path)
        return httpx.Response(200, json={"success": True, "liked": False})

    client = ReviewsClient(httpx.Client(transport=httpx.MockTransport(handler), base_url="http://x"))
    client.has_liked("r/1", "a/b?c#d")
    assert paths == [b"/reviews/r%2F1/liked/a%2Fb%3Fc%23d"]


def test_client_user_name_with_reserved_characters():
    client = _client()
    review = client.create_review("42", "alice", 5, "good")
    client.like(review.id, "j?k #1")
    assert client.has_liked(review.id, "j?k #1") is True
    assert client.has_liked(review.id, "j") is False


class TestReviewPanel:
    def test_refresh_with_padded_user_name(self):
        client = _client()
        review = client.create_review("42", "alice", 5, "good")
        client.like(review.id, "bob")

        panel = ReviewPanel(client, "42", " bob ")
        panel.refresh()
        assert panel.liked == {review.id}

    def test_refresh_derives_liked_state_from_server(self):
        client = _client()
        liked = client.create_review("42", "alice", 5, "liked one")
        client.create_review("42", "bob", 3, "other")
        client.like(liked.id, "carol")

        panel = ReviewPanel(client, "42", "carol")
        panel.liked = {"stale-id"}
        panel.refresh()

        assert panel.loading is False
        assert panel.liked == {liked.id}
        assert len(panel.reviews) == 2

    def test_toggle_like_and_unlike(self):
        client = _client()
        review = client.create_review("42", "alice", 5, "good")
        panel = ReviewPanel(client, "42", "bob")
        panel.refresh()

        panel.toggle_like(review.id)
        assert review.id in panel.liked
        assert panel.reviews[0].likes == 1

        panel.toggle_like(review.id)
        assert review.id not in panel.liked
        assert panel.reviews[0].likes == 0

    def test_toggle_conflict_adopts_server_state(self):
        client = _client()
        review = client.create_review("42", "alice", 5, "good")
        panel = ReviewPanel(client, "42", "bob")
        panel.refresh()
        client.like(review.id, "bob")  # liked from another tab

        panel.toggle_like(review.id)

        assert panel.error is None
        assert review.id in panel.liked

    def test_submit_review_refreshes(self):
        client = _client()
        panel = ReviewPanel(client, "42", "alice")
        review = panel.submit_review(4, "또 올게요")
        assert review is not None
        assert [r.id for r in panel.reviews] == [review.id]

    def test_submit_invalid_review_sets_error(self):
        client = _client()
        panel = ReviewPanel(client, "42", "alice")
        assert panel.submit_review(3, "   ") is None
        assert panel.error == "comment is required"

    def test_refresh_failure_keeps_previous_reviews(self):
        client = MagicMock()
        client.list_reviews.side_effect = UpstreamError("Could not reach the review service")
        panel = ReviewPanel(client, "42", "alice")
        panel.refresh()
        assert panel.reviews == []
        assert panel.error == "Could not reach the review service"
        assert panel.loading is False
