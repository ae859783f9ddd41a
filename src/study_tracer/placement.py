"""Placement test: seed starting mastery for a module's topics."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from loguru import logger

from .models import Interaction, SkillNode, TopicDef

# (minimum correct answers, starting mastery), checked top-down
PLACEMENT_LEVELS: tuple[tuple[int, float], ...] = (
    (3, 0.65),
    (2, 0.45),
)
PLACEMENT_FLOOR = 0.15


def placement_mastery(results: Iterable[Interaction]) -> float:
    correct = sum(1 for result in results if result.is_correct)
    for minimum, mastery in PLACEMENT_LEVELS:
        if correct >= minimum:
            return mastery
    return PLACEMENT_FLOOR


def apply_placement(
    skills: Mapping[str, SkillNode],
    topics: Iterable[TopicDef],
    results: Iterable[Interaction],
) -> dict[str, SkillNode]:
    """Raise each topic and its sub-skills to the placement mastery.

    Mastery never goes down, so retaking the test cannot undo progress.
    Sub-skills are lifted to at least the topic's new value; one that is
    already stronger keeps its own estimate.
    """
    seeded = placement_mastery(list(results))
    new_skills = dict(skills)

    for topic in topics:
        node = new_skills.get(topic.id)
        if node is None:
            logger.debug("Placement skipped unknown topic '{}'", topic.id)
            continue
        mastery = max(node.mastery_probability, seeded)
        new_skills[topic.id] = replace(node, mastery_probability=mastery)
        for sub in topic.sub_skills:
            sub_node = new_skills.get(sub.id)
            if sub_node is not None:
                new_skills[sub.id] = replace(
                    sub_node,
                    mastery_probability=max(sub_node.mastery_probability, mastery),
                )

    return new_skills


__all__ = [
    "PLACEMENT_FLOOR",
    "PLACEMENT_LEVELS",
    "apply_placement",
    "placement_mastery",
]
