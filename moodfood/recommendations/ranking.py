from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from .catalog import CUISINE_KEYWORDS, MOOD_CUISINES
from .models import Mood, Restaurant, UserProfile


def expand_preferences(preferences: Iterable[str]) -> list[str]:
    """Flatten profile cuisine tags into the category keywords they accept.

    Unknown tags contribute nothing.
    """
    keywords: list[str] = []
    for pref in preferences:
        keywords.extend(CUISINE_KEYWORDS.get(pref, []))
    return keywords


def _overlaps(category: str, keyword: str) -> bool:
    # Either direction: "한식 > 국밥" contains "한식", and a terse category can
    # sit inside a longer keyword.
    if not category or not keyword:
        return False
    return keyword in category or category in keyword


def _accepts(category: str, keywords: Sequence[str]) -> bool:
    return any(_overlaps(category, k) for k in keywords)


def _mood_match(category: str, preferred: Sequence[str]) -> bool:
    if not category:
        return False
    return any(k in category for k in preferred)


def rank(
    restaurants: Sequence[Restaurant],
    profile: UserProfile | None,
    mood: Mood | str | None = None,
) -> list[Restaurant]:
    """Filter by cuisine preference, then float mood matches to the top.

    Pure and deterministic. The mood step is a stable partition: it only
    moves matches ahead of non-matches and never reorders within a group.
    Without a profile the input is returned unchanged.
    """
    restaurants = list(restaurants)
    if profile is None or not restaurants:
        return restaurants

    frame = pd.DataFrame({"category": [r.category or "" for r in restaurants]})

    # --- Cuisine filter ---
    if profile.cuisine_preferences:
        keywords = expand_preferences(profile.cuisine_preferences)
        mask = frame["category"].apply(lambda c: _accepts(c, keywords)).astype(bool)
        frame = frame.loc[mask]

    # --- Mood partition ---
    if mood is not None and not frame.empty:
        preferred = MOOD_CUISINES[Mood(mood)]
        frame = frame.assign(
            _mood_rank=frame["category"].apply(lambda c: 0 if _mood_match(c, preferred) else 1)
        )
        frame = frame.sort_values("_mood_rank", kind="stable")

    return [restaurants[i] for i in frame.index]
