from __future__ import annotations

import logging

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import MoodFoodError, ValidationError
from .places.gateway import PlaceSearchGateway
from .recommendations.catalog import metadata as catalog_metadata
from .recommendations.models import RankRequest, RankResponse, Restaurant
from .recommendations.ranking import rank
from .reviews.models import (
    LikeCount,
    LikedStatus,
    LikeRequest,
    ReviewCreate,
    ReviewCreated,
    ReviewList,
)
from .reviews.store import ReviewStore, get_review_store
from .search.region_index import RegionIndex, get_region_index

logger = logging.getLogger(__name__)

app = FastAPI(title="MoodFood Recommendation API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=600,
)

_gateway: PlaceSearchGateway | None = None


def get_place_gateway() -> PlaceSearchGateway:
    global _gateway
    if _gateway is None:
        _gateway = PlaceSearchGateway()
    return _gateway


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(MoodFoodError)
async def handle_moodfood_error(request: Request, exc: MoodFoodError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_errors(exc)},
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return catalog_metadata()


# ── Restaurants ──────────────────────────────────────────────────────────


@app.get("/restaurants", response_model=list[Restaurant])
def list_restaurants(
    background_tasks: BackgroundTasks,
    region: str = Query(default=""),
    index: RegionIndex = Depends(get_region_index),
) -> list[Restaurant]:
    if not region.strip():
        raise ValidationError("region is required")
    return index.list_region(
        region.strip(),
        schedule=lambda r: background_tasks.add_task(index.refresh_in_background, r),
    )


@app.get("/restaurants/search")
def search_places(
    query: str = Query(default=""),
    category: str | None = Query(default=None),
    gateway: PlaceSearchGateway = Depends(get_place_gateway),
) -> dict:
    if not query.strip():
        raise HTTPException(status_code=400, detail="Query parameter is required")
    places = gateway.search(query, category)
    return {
        "success": True,
        "restaurants": [p.model_dump(mode="json", by_alias=True) for p in places],
    }


@app.post("/recommendations", response_model=RankResponse)
def recommendations(body: RankRequest) -> RankResponse:
    ranked = rank(body.restaurants, body.profile, body.mood)
    return RankResponse(restaurants=ranked, total=len(ranked), mood=body.mood)


# ── Reviews ──────────────────────────────────────────────────────────────


@app.post("/reviews", response_model=ReviewCreated)
def create_review(
    body: ReviewCreate,
    store: ReviewStore = Depends(get_review_store),
) -> ReviewCreated:
    review = store.create_review(body.restaurant_id, body.user_name, body.rating, body.comment)
    return ReviewCreated(review=review)


@app.get("/reviews/{restaurant_id}", response_model=ReviewList)
def list_reviews(
    restaurant_id: str,
    store: ReviewStore = Depends(get_review_store),
) -> ReviewList:
    return ReviewList(reviews=store.list_reviews(restaurant_id))


@app.post("/reviews/{review_id}/like", response_model=LikeCount)
def like_review(
    review_id: str,
    body: LikeRequest,
    store: ReviewStore = Depends(get_review_store),
) -> LikeCount:
    return LikeCount(likes=store.like_review(review_id, body.user_name))


@app.delete("/reviews/{review_id}/like", response_model=LikeCount)
def unlike_review(
    review_id: str,
    body: LikeRequest,
    store: ReviewStore = Depends(get_review_store),
) -> LikeCount:
    return LikeCount(likes=store.unlike_review(review_id, body.user_name))


@app.get("/reviews/{review_id}/liked/{user_name}", response_model=LikedStatus)
def has_liked(
    review_id: str,
    user_name: str,
    store: ReviewStore = Depends(get_review_store),
) -> LikedStatus:
    return LikedStatus(liked=store.has_liked(review_id, user_name))
