"""Practice targeting: weakest sub-skill, adaptive difficulty, weak-spot list."""

from __future__ import annotations

import random
from typing import Mapping

from .bkt import difficulty_for_mastery
from .models import Difficulty, SkillNode, SubSkillDef, TopicDef

DEFAULT_MASTERY = 0.1
WEAK_THRESHOLD = 0.45
EXPLORE_RATE = 0.2  # share of picks that go to a random sub-skill for review


def _mastery(skills: Mapping[str, SkillNode], skill_id: str) -> float:
    node = skills.get(skill_id)
    return node.mastery_probability if node is not None else DEFAULT_MASTERY


def weak_skills(
    skills: Mapping[str, SkillNode],
    threshold: float = WEAK_THRESHOLD,
) -> list[SkillNode]:
    return [node for node in skills.values() if node.mastery_probability < threshold]


def pick_sub_skill(
    topic: TopicDef,
    skills: Mapping[str, SkillNode],
    rng: random.Random | None = None,
    explore_rate: float = EXPLORE_RATE,
) -> SubSkillDef:
    """Mostly the weakest sub-skill; sometimes a random one for review."""
    if not topic.sub_skills:
        raise ValueError(f"Topic '{topic.id}' has no sub-skills")
    rng = rng or random.Random()

    if rng.random() < explore_rate:
        return rng.choice(topic.sub_skills)
    # min() keeps catalog order on ties
    return min(topic.sub_skills, key=lambda sub: _mastery(skills, sub.id))


def next_difficulty(skills: Mapping[str, SkillNode], sub_skill_id: str) -> Difficulty:
    return difficulty_for_mastery(_mastery(skills, sub_skill_id))


__all__ = [
    "DEFAULT_MASTERY",
    "EXPLORE_RATE",
    "WEAK_THRESHOLD",
    "next_difficulty",
    "pick_sub_skill",
    "weak_skills",
]
