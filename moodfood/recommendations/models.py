from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Mood(str, Enum):
    happy = "happy"
    sad = "sad"
    stressed = "stressed"
    tired = "tired"
    energetic = "energetic"
    romantic = "romantic"
    casual = "casual"
    excited = "excited"


class PriceRange(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class UserProfile(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    cuisine_preferences: list[str] = Field(default_factory=list)
    price_range: PriceRange = PriceRange.medium
    dietary_restrictions: list[str] = Field(default_factory=list)

    @field_validator("cuisine_preferences", "dietary_restrictions")
    @classmethod
    def _dedupe(cls, tags: list[str]) -> list[str]:
        # Checkbox toggles can repeat a tag; keep first-seen order.
        return list(dict.fromkeys(t.strip() for t in tags if t.strip()))


class Restaurant(CamelModel):
    id: int
    name: str
    category: str | None = None
    address: str = ""
    phone: str | None = None
    x: float | None = None
    y: float | None = None
    region: str | None = None
    place_url: str | None = None
    image_url: str | None = None

    @property
    def identity(self) -> tuple[int, str, str]:
        """Key for list rendering; upstream can repeat ids."""
        return (self.id, self.name, self.address)


class RankRequest(CamelModel):
    restaurants: list[Restaurant] = Field(default_factory=list)
    profile: UserProfile | None = None
    mood: Mood | None = None


class RankResponse(CamelModel):
    restaurants: list[Restaurant]
    total: int
    mood: Mood | None = None
