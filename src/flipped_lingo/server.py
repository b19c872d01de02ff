import logging
import random
import time
from contextlib import asynccontextmanager
from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from flipped_lingo.application.config import resolve_config
from flipped_lingo.application.srs import (
    calculate_next_review,
    calculate_stats,
    get_cards_for_review,
    get_optimal_study_session,
    initialize_card,
)
from flipped_lingo.consts import VERSION
from flipped_lingo.domain.errors import (
    BackupFormatError,
    CardNotInSessionError,
    DeckNotFoundError,
    SchedulerError,
)
from flipped_lingo.domain.srs.models import Card, SchedulerSettings
from flipped_lingo.infrastructure.serialization import CardModel, WireModel

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("flipped_lingo.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"flipped-lingo server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("flipped-lingo server shutting down...")


app = FastAPI(
    title="flipped-lingo",
    description="Stateless spaced-repetition scheduling API.",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(SchedulerError)
@app.exception_handler(BackupFormatError)
async def unprocessable_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(DeckNotFoundError)
@app.exception_handler(CardNotInSessionError)
async def not_found_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


# Request models. Settings fields left out fall back to the resolved config.
class SettingsOverride(WireModel):
    max_new_cards_per_day: int | None = Field(default=None, ge=0)
    max_reviews_per_day: int | None = Field(default=None, ge=0)
    easy_bonus: float | None = Field(default=None, gt=0)
    hard_penalty: float | None = Field(default=None, gt=0)
    graduating_interval: int | None = Field(default=None, ge=1)
    easy_interval: int | None = Field(default=None, ge=1)
    maximum_interval: int | None = Field(default=None, ge=1)
    minimum_interval: int | None = Field(default=None, ge=1)


class TimedRequest(WireModel):
    settings: SettingsOverride | None = None
    now: datetime | None = None

    @field_validator("now")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class CardsRequest(TimedRequest):
    cards: list[CardModel]


class ReviewRequest(TimedRequest):
    card: CardModel
    # Passed through unconverted; validate_quality accepts only int 0-5
    quality: Any
    time_spent: int = Field(default=0, ge=0)


class SessionRequest(CardsRequest):
    target_minutes: int | None = Field(default=None, ge=1)
    seed: int | None = None


class ReviewResultModel(WireModel):
    card_id: str
    quality: int
    time_spent: int
    was_correct: bool
    previous_interval: int
    new_interval: int
    review_date: datetime


class ReviewResponse(WireModel):
    updated_card: CardModel
    review_result: ReviewResultModel


class DueResponse(WireModel):
    new_cards: list[CardModel]
    review_cards: list[CardModel]


class StatsResponse(WireModel):
    total_cards: int
    new_cards: int
    review_cards: int
    mastered_cards: int
    learning_cards: int
    average_ease_factor: float
    retention_rate: float
    daily_reviews: int
    streak_days: int


def _settings(override: SettingsOverride | None) -> SchedulerSettings:
    base = resolve_config().scheduler_settings()
    if override is None:
        return base
    values = {
        name: value
        for name, value in override.model_dump().items()
        if value is not None
    }
    return replace(base, **values)


def _cards(models: list[CardModel]) -> list[Card]:
    return [m.to_domain() for m in models]


def _dump(cards: list[Card]) -> list[CardModel]:
    return [CardModel.from_domain(card) for card in cards]


@app.post("/cards/initialize", response_model=list[CardModel])
async def initialize_cards(req: CardsRequest):
    return _dump([initialize_card(card, req.now) for card in _cards(req.cards)])


@app.post("/review", response_model=ReviewResponse)
async def review_card(req: ReviewRequest):
    updated, result = calculate_next_review(
        req.card.to_domain(), req.quality, _settings(req.settings), req.now
    )
    result = result.with_time_spent(req.time_spent)
    logger.info(f"Reviewed {result.card_id}: q={result.quality} -> {result.new_interval}d")
    return ReviewResponse(
        updated_card=CardModel.from_domain(updated),
        review_result=ReviewResultModel(**asdict(result)),
    )


@app.post("/due", response_model=DueResponse)
async def due_cards(req: CardsRequest):
    due = get_cards_for_review(_cards(req.cards), _settings(req.settings), req.now)
    return DueResponse(new_cards=_dump(due.new_cards), review_cards=_dump(due.review_cards))


@app.post("/session", response_model=list[CardModel])
async def study_session(req: SessionRequest):
    config = resolve_config()
    session = get_optimal_study_session(
        _cards(req.cards),
        target_minutes=req.target_minutes or config.default_target_minutes,
        settings=_settings(req.settings),
        now=req.now,
        rng=random.Random(req.seed) if req.seed is not None else None,
        session_size=config.session_size,
    )
    return _dump(session)


@app.post("/stats", response_model=StatsResponse)
async def deck_stats(req: CardsRequest):
    stats = calculate_stats(_cards(req.cards), req.now)
    return StatsResponse(**asdict(stats))
