from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PlaceSearchConfig:
    api_key: str = os.getenv("KAKAO_REST_API_KEY", "")
    endpoint: str = "https://dapi.kakao.com/v2/local/search/keyword.json"
    category_group_code: str = "FD6"  # restaurants
    default_suffix: str = "맛집"
    page_size: int = 15
    timeout: float = 10.0
    enabled: bool = True


DEFAULT_PLACE_SEARCH_CONFIG = PlaceSearchConfig()
