from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class Difficulty(str, Enum):
    BASIC = "Basic"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    OLYMPIAD = "Olympiad"


class ReviewGrade(IntEnum):
    """SM-2 recall quality. Only four points of the 0-5 scale are produced."""

    AGAIN = 0  # complete blackout
    HARD = 3   # remembered with great difficulty
    GOOD = 4   # correct after hesitation
    EASY = 5   # perfect response


@dataclass(slots=True, frozen=True)
class BKTParams:
    p_init: float
    p_transit: float
    p_slip: float
    p_guess: float


@dataclass(slots=True, frozen=True)
class SkillNode:
    id: str
    name: str
    is_parent: bool
    mastery_probability: float
    total_attempts: int = 0
    correct_streak: int = 0
    average_response_time: float = 0.0
    sub_skill_ids: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class Interaction:
    topic_id: str
    sub_skill_id: str
    is_correct: bool
    time_spent_seconds: float
    difficulty: Difficulty
    id: str = ""
    timestamp: int = 0


@dataclass(slots=True, frozen=True)
class ReviewCard:
    interval: int
    repetition: int
    ease_factor: float
    next_review_date: int  # epoch milliseconds


@dataclass(slots=True, frozen=True)
class Flashcard:
    id: str
    topic_id: str
    front: str
    back: str
    srs: ReviewCard


@dataclass(slots=True, frozen=True)
class SubSkillDef:
    id: str
    name: str
    parent_id: str


@dataclass(slots=True, frozen=True)
class TopicDef:
    id: str
    name: str
    description: str = ""
    module: str = ""
    sub_skills: tuple[SubSkillDef, ...] = field(default_factory=tuple)


def ensure_difficulty(value: Difficulty | str) -> Difficulty:
    """Normalise and validate a difficulty name."""

    if isinstance(value, Difficulty):
        return value
    normalized = str(value).strip().lower()
    for difficulty in Difficulty:
        if difficulty.value.lower() == normalized or difficulty.name.lower() == normalized:
            return difficulty
    raise ValueError(f"Unsupported difficulty: {value}")


def ensure_grade(value: ReviewGrade | int | str) -> ReviewGrade:
    """Validate a review grade coming from the UI layer.

    Accepts a ReviewGrade, one of the integers 0/3/4/5, or a grade name
    ("again", "hard", "good", "easy"). Anything else is rejected so the
    scheduler itself never sees an out-of-range quality.
    """

    if isinstance(value, ReviewGrade):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Unsupported review grade: {value!r}")
    if isinstance(value, int):
        try:
            return ReviewGrade(value)
        except ValueError:
            raise ValueError(f"Unsupported review grade: {value!r}") from None
    normalized = str(value).strip().upper()
    if normalized in ReviewGrade.__members__:
        return ReviewGrade[normalized]
    raise ValueError(f"Unsupported review grade: {value!r}")


__all__ = [
    "BKTParams",
    "Difficulty",
    "Flashcard",
    "Interaction",
    "ReviewCard",
    "ReviewGrade",
    "SkillNode",
    "SubSkillDef",
    "TopicDef",
    "ensure_difficulty",
    "ensure_grade",
]
