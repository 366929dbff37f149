"""
Static lookup tables for profile options, cuisine keywords and moods.

Category keywords are matched against the provider's free-text category
strings, which are Korean (e.g. "음식점 > 한식 > 국밥").
"""
from __future__ import annotations

from .models import Mood, PriceRange

# Profile cuisine tag -> category keywords it accepts.
CUISINE_KEYWORDS: dict[str, list[str]] = {
    "korean": ["한식", "한국음식"],
    "japanese": ["일식", "일본음식"],
    "chinese": ["중식", "중국음식"],
    "western": ["양식", "서양음식"],
    "italian": ["이탈리안", "이탈리아음식"],
    "dessert": ["디저트", "카페", "베이커리"],
}

# Mood -> category keywords to surface first, in preference order.
MOOD_CUISINES: dict[Mood, list[str]] = {
    Mood.happy: ["일식", "이탈리안", "디저트", "카페"],
    Mood.sad: ["한식", "양식", "디저트", "카페"],
    Mood.stressed: ["한식", "중식", "양식"],
    Mood.tired: ["한식", "중식"],
    Mood.energetic: ["이탈리안", "중식", "양식"],
    Mood.romantic: ["일식", "이탈리안"],
    Mood.casual: ["양식", "디저트", "카페"],
    Mood.excited: ["중식", "한식", "양식"],
}

MOOD_LABELS: dict[Mood, str] = {
    Mood.happy: "행복한",
    Mood.sad: "우울한",
    Mood.stressed: "스트레스 받는",
    Mood.tired: "피곤한",
    Mood.energetic: "활기찬",
    Mood.romantic: "로맨틱한",
    Mood.casual: "편안한",
    Mood.excited: "신나는",
}

CUISINE_OPTIONS: list[dict[str, str]] = [
    {"id": "korean", "label": "한식"},
    {"id": "japanese", "label": "일식"},
    {"id": "chinese", "label": "중식"},
    {"id": "western", "label": "양식"},
    {"id": "italian", "label": "이탈리안"},
    {"id": "dessert", "label": "디저트/카페"},
]

DIETARY_OPTIONS: list[dict[str, str]] = [
    {"id": "vegetarian", "label": "채식"},
    {"id": "vegan", "label": "비건"},
    {"id": "halal", "label": "할랄"},
    {"id": "gluten-free", "label": "글루텐 프리"},
]

PRICE_LABELS: dict[PriceRange, str] = {
    PriceRange.low: "저렴한",
    PriceRange.medium: "보통",
    PriceRange.high: "고급",
}


def mood_heading(mood: Mood) -> str:
    return f"{MOOD_LABELS[mood]} 기분에 딱 맞는 맛집"


def metadata() -> dict:
    return {
        "cuisines": CUISINE_OPTIONS,
        "dietary": DIETARY_OPTIONS,
        "price_ranges": [{"id": p.value, "label": label} for p, label in PRICE_LABELS.items()],
        "moods": [
            {"id": m.value, "label": MOOD_LABELS[m], "preferred": MOOD_CUISINES[m]}
            for m in Mood
        ],
    }
