from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import Field

from ..errors import UpstreamError
from ..recommendations.models import CamelModel, PriceRange
from .config import DEFAULT_PLACE_SEARCH_CONFIG, PlaceSearchConfig

logger = logging.getLogger(__name__)

DEFAULT_CUISINE = "음식점"
_CATEGORY_SEPARATOR = ">"


class PlaceRecord(CamelModel):
    """A provider place in restaurant shape.

    ``id`` may be synthetic (``ext_<index>``) and is only unique within a
    single response. Never persist it as a key.
    """

    id: str
    name: str
    cuisine: str = DEFAULT_CUISINE
    category: str = ""
    description: str = ""
    location: str = ""
    rating: float = 0.0
    price_range: PriceRange = PriceRange.medium
    image_url: str = ""
    tags: list[str] = Field(default_factory=list)
    phone: str | None = None
    place_url: str | None = None
    x: float | None = None
    y: float | None = None

    @property
    def has_provider_id(self) -> bool:
        return not self.id.startswith("ext_")


def trailing_category(category_name: str | None) -> str:
    """``"음식점 > 한식 > 국밥"`` -> ``"국밥"``."""
    if not category_name:
        return DEFAULT_CUISINE
    label = category_name.split(_CATEGORY_SEPARATOR)[-1].strip()
    return label or DEFAULT_CUISINE


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_place(place: dict[str, Any], index: int) -> PlaceRecord:
    address = place.get("address_name") or ""
    category = (place.get("category_name") or "").strip()
    return PlaceRecord(
        id=str(place.get("id") or f"ext_{index}"),
        name=place.get("place_name") or "",
        cuisine=trailing_category(category),
        category=category,
        description=address,
        location=place.get("road_address_name") or address,
        phone=place.get("phone") or None,
        place_url=place.get("place_url") or None,
        x=_to_float(place.get("x")),
        y=_to_float(place.get("y")),
    )


def normalize_places(payload: Any) -> list[PlaceRecord]:
    documents = payload.get("documents") if isinstance(payload, dict) else None
    if not isinstance(documents, list):
        raise UpstreamError("Place search returned an unexpected response")
    return [
        normalize_place(place, index)
        for index, place in enumerate(documents)
        if isinstance(place, dict)
    ]


def build_query(query: str, category: str | None = None, suffix: str = "맛집") -> str:
    category = (category or "").strip()
    return f"{query} {category}" if category else f"{query} {suffix}"


class PlaceSearchGateway:
    def __init__(
        self,
        config: PlaceSearchConfig = DEFAULT_PLACE_SEARCH_CONFIG,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._client = client

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.config.timeout)
        return self._client

    def search(self, query: str, category: str | None = None) -> list[PlaceRecord]:
        """Search the provider and return normalized places.

        Raises ``UpstreamError`` when the provider is unconfigured, unreachable,
        answers non-2xx or sends a payload without a ``documents`` list.
        """
        if not self.config.enabled or not self.config.api_key:
            raise UpstreamError("Place search is not configured")

        search_query = build_query(query.strip(), category, self.config.default_suffix)
        try:
            response = self._http().get(
                self.config.endpoint,
                params={
                    "query": search_query,
                    "category_group_code": self.config.category_group_code,
                    "size": self.config.page_size,
                },
                headers={"Authorization": f"KakaoAK {self.config.api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Place search request failed for %r", search_query, exc_info=True)
            raise UpstreamError("Could not reach the place search provider") from exc

        if not response.is_success:
            logger.warning(
                "Place search error: %s %s", response.status_code, response.reason_phrase,
            )
            raise UpstreamError("Failed to fetch places from the search provider")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Place search returned an unexpected response") from exc

        places = normalize_places(payload)
        logger.info("Found %d places for query: %s", len(places), search_query)
        return places

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
