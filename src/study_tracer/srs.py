"""SuperMemo-2 spaced repetition over caller-owned flashcard decks."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence, TypeVar

from loguru import logger

from .models import Flashcard, ReviewCard, ReviewGrade

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
PASSING_GRADE = 3

_Reviewable = TypeVar("_Reviewable", Flashcard, ReviewCard)


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return _normalize_datetime(now or datetime.now(timezone.utc))


def to_millis(value: datetime) -> int:
    return int(_normalize_datetime(value).timestamp() * 1000)


def from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def initial_state(now: Optional[datetime] = None) -> ReviewCard:
    """A never-reviewed card, due immediately."""
    return ReviewCard(
        interval=0,
        repetition=0,
        ease_factor=DEFAULT_EASE,
        next_review_date=to_millis(_now(now)),
    )


def next_ease(ease_factor: float, grade: int) -> float:
    # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at MIN_EASE
    miss = 5 - grade
    return max(MIN_EASE, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def next_state(
    current: ReviewCard,
    grade: ReviewGrade,
    now: Optional[datetime] = None,
) -> ReviewCard:
    """Grade a recall and return the replacement state.

    A failed card comes back tomorrow, not immediately. The due date is
    counted from `now`, not from the previous due date.
    """
    if grade >= PASSING_GRADE:
        if current.repetition == 0:
            interval = FIRST_INTERVAL
        elif current.repetition == 1:
            interval = SECOND_INTERVAL
        else:
            # .5 rounds up
            interval = math.floor(current.interval * current.ease_factor + 0.5)
        repetition = current.repetition + 1
    else:
        interval = FIRST_INTERVAL
        repetition = 0

    due = _now(now) + timedelta(days=interval)
    return ReviewCard(
        interval=interval,
        repetition=repetition,
        ease_factor=next_ease(current.ease_factor, int(grade)),
        next_review_date=to_millis(due),
    )


def _state_of(card: Flashcard | ReviewCard) -> ReviewCard:
    return card.srs if isinstance(card, Flashcard) else card


def is_due(card: Flashcard | ReviewCard, now: Optional[datetime] = None) -> bool:
    return _state_of(card).next_review_date <= to_millis(_now(now))


def due_cards(
    cards: Iterable[_Reviewable],
    now: Optional[datetime] = None,
) -> list[_Reviewable]:
    """Cards whose review date has passed, in their original order."""
    threshold = to_millis(_now(now))
    return [card for card in cards if _state_of(card).next_review_date <= threshold]


def count_due(cards: Iterable[Flashcard | ReviewCard], now: Optional[datetime] = None) -> int:
    return len(due_cards(cards, now))


def _clean(text: str | None) -> str:
    if text is None:
        return ""
    return text.strip()


def new_flashcard(
    card_id: str,
    topic_id: str,
    front: str,
    back: str,
    *,
    now: Optional[datetime] = None,
) -> Flashcard:
    trimmed_front = _clean(front)
    trimmed_back = _clean(back)
    if not trimmed_front:
        raise ValueError("front must not be empty")
    if not trimmed_back:
        raise ValueError("back must not be empty")
    return Flashcard(
        id=card_id,
        topic_id=topic_id,
        front=trimmed_front,
        back=trimmed_back,
        srs=initial_state(now),
    )


def review_flashcard(
    deck: Sequence[Flashcard],
    card_id: str,
    grade: ReviewGrade,
    now: Optional[datetime] = None,
) -> list[Flashcard]:
    """New deck with only the matching card rescheduled."""
    found = False
    updated: list[Flashcard] = []
    for card in deck:
        if card.id == card_id:
            found = True
            card = replace(card, srs=next_state(card.srs, grade, now))
        updated.append(card)
    if not found:
        logger.warning("Review for unknown flashcard '{}' ignored", card_id)
    return updated


__all__ = [
    "DEFAULT_EASE",
    "MIN_EASE",
    "count_due",
    "due_cards",
    "from_millis",
    "initial_state",
    "is_due",
    "new_flashcard",
    "next_ease",
    "next_state",
    "review_flashcard",
    "to_millis",
]
