from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchConfig:
    base_url: str = os.getenv("MOODFOOD_API_URL", "http://localhost:8081")
    listing_path: str = "/restaurants"
    interval: float = 1.0  # seconds between empty polls
    max_attempts: int = 10
    placeholder_image_url: str = (
        "https://images.unsplash.com/photo-1517248135467-4c7edcad34c4?w=400"
    )
    request_timeout: float = 10.0


@dataclass(frozen=True)
class RegionIndexConfig:
    ttl: float = 300.0  # 5 minutes


DEFAULT_SEARCH_CONFIG = SearchConfig()
DEFAULT_REGION_INDEX_CONFIG = RegionIndexConfig()
