"""
Client-side polling over the region listing endpoint.

The listing endpoint is eventually consistent: a region that was never
searched before answers ``[]`` until the index catches up. The controller
therefore retries *empty* answers on a fixed interval, up to a hard cap,
but gives up at once on transport errors, non-2xx statuses and malformed
payloads.

Only one search runs per controller. Starting a new one cancels the
in-flight one, and a generation counter guarantees an old response can
never be reported as current.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..recommendations.models import Restaurant
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig

logger = logging.getLogger(__name__)

_RESTAURANT_LIST = TypeAdapter(list[Restaurant])


class SearchStatus(str, Enum):
    found = "found"
    no_results = "no_results"  # budget exhausted, every answer was empty
    failed = "failed"  # non-retryable error
    superseded = "superseded"  # a newer search took over
    skipped = "skipped"  # blank region, nothing sent


@dataclass
class SearchOutcome:
    region: str
    status: SearchStatus
    restaurants: list[Restaurant] = field(default_factory=list)
    attempts: int = 0
    error: str | None = None


class _Superseded(Exception):
    pass


class _Failed(Exception):
    pass


class SearchPollController:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: SearchConfig = DEFAULT_SEARCH_CONFIG,
        interval: float | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.interval = config.interval if interval is None else interval
        self.max_attempts = config.max_attempts if max_attempts is None else max_attempts
        self._client = client
        self._sleep = sleep
        self._generation = 0
        self._inflight: asyncio.Task | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url, timeout=self.config.request_timeout,
            )
        return self._client

    async def aclose(self) -> None:
        self.cancel()
        if self._client is not None:
            await self._client.aclose()

    def cancel(self) -> None:
        """Abandon the in-flight search, if any."""
        self._generation += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    async def search(self, region: str) -> SearchOutcome:
        region = (region or "").strip()
        if not region:
            return SearchOutcome(region=region, status=SearchStatus.skipped)

        self.cancel()
        generation = self._generation
        task = asyncio.ensure_future(self._poll(region, generation))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and generation != self._generation:
                return SearchOutcome(region=region, status=SearchStatus.superseded)
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

    def _check(self, generation: int) -> None:
        if generation != self._generation:
            raise _Superseded()

    def _parse(self, response: httpx.Response) -> list[Restaurant]:
        if not response.is_success:
            raise _Failed(f"listing endpoint answered {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise _Failed("listing endpoint sent invalid JSON") from exc
        if not isinstance(data, list):
            raise _Failed("listing endpoint did not send a list")
        try:
            return _RESTAURANT_LIST.validate_python(data)
        except PydanticValidationError as exc:
            raise _Failed("listing endpoint sent malformed restaurants") from exc

    def _with_images(self, restaurants: list[Restaurant]) -> list[Restaurant]:
        placeholder = self.config.placeholder_image_url
        return [
            r if r.image_url else r.model_copy(update={"image_url": placeholder})
            for r in restaurants
        ]

    async def _poll(self, region: str, generation: int) -> SearchOutcome:
        attempts = 0
        try:
            while attempts < self.max_attempts:
                self._check(generation)
                attempts += 1
                try:
                    response = await self._http().get(
                        self.config.listing_path, params={"region": region},
                    )
                except httpx.HTTPError as exc:
                    raise _Failed(f"listing request failed: {exc}") from exc
                self._check(generation)

                restaurants = self._parse(response)
                if restaurants:
                    logger.info(
                        "Search for %r found %d restaurants after %d attempt(s)",
                        region, len(restaurants), attempts,
                    )
                    return SearchOutcome(
                        region=region,
                        status=SearchStatus.found,
                        restaurants=self._with_images(restaurants),
                        attempts=attempts,
                    )

                logger.debug("Search for %r empty on attempt %d", region, attempts)
                if attempts < self.max_attempts:
                    await self._sleep(self.interval)
        except _Superseded:
            return SearchOutcome(region=region, status=SearchStatus.superseded, attempts=attempts)
        except _Failed as exc:
            logger.warning("Search for %r failed: %s", region, exc)
            return SearchOutcome(
                region=region, status=SearchStatus.failed, attempts=attempts, error=str(exc),
            )

        logger.info("Search for %r found nothing after %d attempts", region, attempts)
        return SearchOutcome(region=region, status=SearchStatus.no_results, attempts=attempts)
