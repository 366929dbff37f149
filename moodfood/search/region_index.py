"""
Eventually-consistent region index behind ``GET /restaurants?region=``.

A region that has not been indexed yet (or whose entry expired) reads as
empty and triggers one background refresh through the place search gateway.
Callers are expected to poll until the entry shows up.
"""
from __future__ import annotations

import itertools
import logging
import threading
import time
from typing import Any, Callable

from ..errors import UpstreamError
from ..places.gateway import PlaceRecord, PlaceSearchGateway
from ..recommendations.models import Restaurant
from .config import DEFAULT_REGION_INDEX_CONFIG, RegionIndexConfig

logger = logging.getLogger(__name__)


def _region_key(region: str) -> str:
    return " ".join(region.split()).lower()


class RegionIndex:
    def __init__(
        self,
        gateway: PlaceSearchGateway,
        config: RegionIndexConfig = DEFAULT_REGION_INDEX_CONFIG,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gateway = gateway
        self._config = config
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] = {}
        self._pending: set[str] = set()
        self._failures: dict[str, str] = {}
        # Synthetic provider ids are positional; rows without a numeric id
        # get a number from here instead.
        self._local_ids = itertools.count(1)
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def lookup(self, region: str) -> list[Restaurant] | None:
        """Return the indexed restaurants, or ``None`` if not indexed yet.

        Raises ``UpstreamError`` once if the last refresh for *region* failed.
        """
        key = _region_key(region)
        with self._lock:
            failure = self._failures.pop(key, None)
            if failure is not None:
                raise UpstreamError(failure)
            entry = self._entries.get(key)
            if entry and self._clock() - entry["created_at"] < self._config.ttl:
                self._hits += 1
                return list(entry["value"])
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def claim(self, region: str) -> bool:
        """Mark *region* as being indexed. ``False`` if a refresh is already pending."""
        key = _region_key(region)
        with self._lock:
            if key in self._pending:
                return False
            self._pending.add(key)
            return True

    def _to_restaurant(self, place: PlaceRecord, region: str) -> Restaurant:
        rid = int(place.id) if place.id.isdigit() else next(self._local_ids)
        return Restaurant(
            id=rid,
            name=place.name,
            category=place.category or None,
            address=place.location,
            phone=place.phone,
            x=place.x,
            y=place.y,
            region=region,
            place_url=place.place_url,
            image_url=place.image_url or None,
        )

    def _record_failure(self, key: str, message: str) -> None:
        with self._lock:
            self._failures[key] = message

    def refresh(self, region: str) -> list[Restaurant]:
        """Fetch *region* from the gateway and index it.

        Any failure is recorded for the next lookup and re-raised. The pending
        claim is released either way, so a later read can schedule again.
        """
        key = _region_key(region)
        try:
            places = self._gateway.search(region)
            restaurants = [self._to_restaurant(p, region) for p in places]
        except UpstreamError as exc:
            self._record_failure(key, exc.message)
            raise
        except Exception:
            self._record_failure(key, "Failed to index restaurants for this region")
            raise
        else:
            with self._lock:
                self._entries[key] = {"value": restaurants, "created_at": self._clock()}
        finally:
            with self._lock:
                self._pending.discard(key)

        logger.info("Indexed %d restaurants for region %r", len(restaurants), region)
        return restaurants

    def refresh_in_background(self, region: str) -> None:
        try:
            self.refresh(region)
        except UpstreamError:
            # Recorded; the next lookup reports it.
            logger.warning("Indexing failed for region %r", region, exc_info=True)
        except Exception:
            logger.exception("Unexpected error indexing region %r", region)

    def list_region(
        self,
        region: str,
        schedule: Callable[[str], None],
    ) -> list[Restaurant]:
        """Read *region*; when it is missing, hand one refresh to *schedule*."""
        restaurants = self.lookup(region)
        if restaurants is not None:
            return restaurants
        if self.claim(region):
            schedule(region)
        return []

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "pending": len(self._pending),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._pending.clear()
            self._failures.clear()
            self._hits = 0
            self._misses = 0


_region_index: RegionIndex | None = None


def get_region_index() -> RegionIndex:
    global _region_index
    if _region_index is None:
        _region_index = RegionIndex(PlaceSearchGateway())
    return _region_index
