"""
Client application state as an immutable value plus a reducer.

The session (profile, mood, search results, open restaurant) is never
mutated in place; every change goes through ``reduce(state, action)``.
"""
from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from ..recommendations.catalog import mood_heading
from ..recommendations.models import Mood, Restaurant, UserProfile
from ..recommendations.ranking import rank
from ..search.poll import SearchOutcome, SearchPollController, SearchStatus

NO_RESULTS_MESSAGE = "검색 결과가 없습니다. 다른 지역을 검색해보세요."
NO_MATCHES_MESSAGE = "선호도에 맞는 맛집이 없습니다. 프로필 설정을 변경해보세요."
SEARCH_FAILED_MESSAGE = "맛집 검색에 실패했습니다. 잠시 후 다시 시도해주세요."


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: UserProfile | None = None
    mood: Mood | None = None
    region: str = ""
    restaurants: list[Restaurant] = Field(default_factory=list)
    is_loading: bool = False
    has_searched: bool = False
    search_failed: bool = False
    selected_restaurant: Restaurant | None = None
    search_generation: int = 0


# ── Actions ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProfileCompleted:
    profile: UserProfile


@dataclass(frozen=True)
class ProfileReset:
    pass


@dataclass(frozen=True)
class MoodSelected:
    mood: Mood


@dataclass(frozen=True)
class MoodCleared:
    pass


@dataclass(frozen=True)
class SearchStarted:
    region: str


@dataclass(frozen=True)
class SearchCompleted:
    generation: int
    outcome: SearchOutcome


@dataclass(frozen=True)
class RestaurantOpened:
    restaurant: Restaurant


@dataclass(frozen=True)
class RestaurantClosed:
    pass


Action = (
    ProfileCompleted | ProfileReset | MoodSelected | MoodCleared
    | SearchStarted | SearchCompleted | RestaurantOpened | RestaurantClosed
)


def reduce(state: AppState, action: Action) -> AppState:
    if isinstance(action, ProfileCompleted):
        return state.model_copy(update={"profile": action.profile})
    if isinstance(action, ProfileReset):
        return state.model_copy(update={"profile": None})
    if isinstance(action, MoodSelected):
        return state.model_copy(update={"mood": Mood(action.mood)})
    if isinstance(action, MoodCleared):
        return state.model_copy(update={"mood": None})

    if isinstance(action, SearchStarted):
        region = action.region.strip()
        if not region:
            return state
        return state.model_copy(update={
            "region": region,
            "restaurants": [],
            "mood": None,
            "is_loading": True,
            "has_searched": True,
            "search_failed": False,
            "search_generation": state.search_generation + 1,
        })

    if isinstance(action, SearchCompleted):
        outcome = action.outcome
        if action.generation != state.search_generation:
            return state
        if outcome.status in (SearchStatus.superseded, SearchStatus.skipped):
            return state
        return state.model_copy(update={
            "restaurants": list(outcome.restaurants),
            "is_loading": False,
            "search_failed": outcome.status == SearchStatus.failed,
        })

    if isinstance(action, RestaurantOpened):
        return state.model_copy(update={"selected_restaurant": action.restaurant})
    if isinstance(action, RestaurantClosed):
        return state.model_copy(update={"selected_restaurant": None})

    raise TypeError(f"Unknown action: {action!r}")


# ── Derived views ────────────────────────────────────────────────────────


def visible_restaurants(state: AppState) -> list[Restaurant]:
    return rank(state.restaurants, state.profile, state.mood)


def heading(state: AppState) -> str:
    return mood_heading(state.mood) if state.mood else state.region


def empty_message(state: AppState) -> str | None:
    """Plain-language reason the list is empty, or ``None`` if it is not."""
    if not state.has_searched or state.is_loading:
        return None
    if state.search_failed:
        return SEARCH_FAILED_MESSAGE
    if not state.restaurants:
        return NO_RESULTS_MESSAGE
    if not visible_restaurants(state):
        return NO_MATCHES_MESSAGE
    return None


class SessionController:
    """Runs searches through the poller and folds the results into state."""

    def __init__(self, poller: SearchPollController, state: AppState | None = None) -> None:
        self.poller = poller
        self.state = state or AppState()

    def dispatch(self, action: Action) -> AppState:
        self.state = reduce(self.state, action)
        return self.state

    async def search(self, region: str) -> AppState:
        before = self.state.search_generation
        self.dispatch(SearchStarted(region))
        generation = self.state.search_generation
        if generation == before:
            return self.state
        outcome = await self.poller.search(region)
        return self.dispatch(SearchCompleted(generation, outcome))
