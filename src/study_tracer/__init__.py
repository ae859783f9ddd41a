"""Student knowledge model: hierarchical BKT and SM-2 review scheduling."""

from .bkt import apply_interactions, difficulty_for_mastery, update_knowledge
from .models import (
    BKTParams,
    Difficulty,
    Flashcard,
    Interaction,
    ReviewCard,
    ReviewGrade,
    SkillNode,
    ensure_grade,
)
from .srs import due_cards, initial_state, next_state, review_flashcard

__all__ = [
    "BKTParams",
    "Difficulty",
    "Flashcard",
    "Interaction",
    "ReviewCard",
    "ReviewGrade",
    "SkillNode",
    "apply_interactions",
    "difficulty_for_mastery",
    "due_cards",
    "ensure_grade",
    "initial_state",
    "next_state",
    "review_flashcard",
    "update_knowledge",
]
