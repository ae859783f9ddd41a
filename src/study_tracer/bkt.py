"""Hierarchical Bayesian Knowledge Tracing (BKT) with time-aware slip/guess."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from loguru import logger

from .config import DEFAULT_PARAMS, EXPECTED_TIME
from .models import BKTParams, Difficulty, Interaction, SkillNode

MIN_MASTERY = 0.01
MAX_MASTERY = 0.99

# Slip/guess never exceed this after the time adjustment
MAX_NOISE = 0.5

# Sub-skill evidence is weaker proof of topic mastery
PARENT_DILUTION = 0.1

SLOW_FACTOR = 2.5   # correct but slower than 2.5x expected
FAST_FACTOR = 0.2   # faster than 0.2x expected

# Mastery floors for each difficulty level, checked top-down
DIFFICULTY_THRESHOLDS: tuple[tuple[float, Difficulty], ...] = (
    (0.90, Difficulty.OLYMPIAD),
    (0.70, Difficulty.ADVANCED),
    (0.40, Difficulty.INTERMEDIATE),
)


def clamp_mastery(p: float) -> float:
    return max(MIN_MASTERY, min(MAX_MASTERY, p))


def adjust_for_time(
    params: BKTParams,
    is_correct: bool,
    time_spent: float,
    difficulty: Difficulty,
    expected_times: Mapping[Difficulty, float] = EXPECTED_TIME,
) -> BKTParams:
    """Return a copy of params with slip/guess shifted by response time.

    Correct and slow reads as a lucky guess (guess +0.15, slip +0.05).
    Correct and very fast reads as a guess (guess +0.30).
    Wrong and very fast reads as a careless slip (slip +0.30).
    Wrong and slow is a genuine gap and leaves the parameters alone.
    """
    expected = expected_times[difficulty]
    p_guess = params.p_guess
    p_slip = params.p_slip

    if is_correct:
        if time_spent > expected * SLOW_FACTOR:
            p_guess += 0.15
            p_slip += 0.05
        elif time_spent < expected * FAST_FACTOR:
            p_guess += 0.30
    elif time_spent < expected * FAST_FACTOR:
        p_slip += 0.30

    return replace(params, p_guess=min(MAX_NOISE, p_guess), p_slip=min(MAX_NOISE, p_slip))


def bkt_update(
    p_mastery: float,
    is_correct: bool,
    *,
    p_transit: float = DEFAULT_PARAMS.p_transit,
    p_guess: float = DEFAULT_PARAMS.p_guess,
    p_slip: float = DEFAULT_PARAMS.p_slip,
) -> float:
    """Standard BKT: posterior update then learning transition.

    Correct: P(L|obs) = P(L)*(1-P(S)) / [P(L)*(1-P(S)) + (1-P(L))*P(G)]
    Wrong:   P(L|obs) = P(L)*P(S) / [P(L)*P(S) + (1-P(L))*(1-P(G))]
    Then:    P(L_new) = P(L|obs) + (1 - P(L|obs)) * P(T)

    The result is clamped to [MIN_MASTERY, MAX_MASTERY].
    """
    if is_correct:
        numerator = p_mastery * (1 - p_slip)
        denominator = p_mastery * (1 - p_slip) + (1 - p_mastery) * p_guess
    else:
        numerator = p_mastery * p_slip
        denominator = p_mastery * p_slip + (1 - p_mastery) * (1 - p_guess)

    if denominator == 0:
        p_posterior = 0.0
    else:
        p_posterior = numerator / denominator

    # Learning transition
    p_new = p_posterior + (1 - p_posterior) * p_transit
    return clamp_mastery(p_new)


def _traced_mastery(
    node: SkillNode,
    interaction: Interaction,
    params: BKTParams,
    expected_times: Mapping[Difficulty, float],
) -> float:
    adjusted = adjust_for_time(
        params,
        interaction.is_correct,
        interaction.time_spent_seconds,
        interaction.difficulty,
        expected_times,
    )
    return bkt_update(
        node.mastery_probability,
        interaction.is_correct,
        p_transit=adjusted.p_transit,
        p_guess=adjusted.p_guess,
        p_slip=adjusted.p_slip,
    )


def update_knowledge(
    skills: Mapping[str, SkillNode],
    interaction: Interaction,
    params: BKTParams = DEFAULT_PARAMS,
    expected_times: Mapping[Difficulty, float] = EXPECTED_TIME,
) -> dict[str, SkillNode]:
    """Apply one interaction to its sub-skill and, diluted, to its parent topic.

    Returns a new dict; the input mapping is left untouched. A node that is
    not in the map is skipped without error. The parent's average response
    time is left as is, only the sub-skill tracks timing.
    """
    new_skills = dict(skills)
    correct = interaction.is_correct

    sub_skill = new_skills.get(interaction.sub_skill_id)
    if sub_skill is not None:
        attempts = sub_skill.total_attempts
        new_skills[sub_skill.id] = replace(
            sub_skill,
            mastery_probability=_traced_mastery(sub_skill, interaction, params, expected_times),
            total_attempts=attempts + 1,
            correct_streak=sub_skill.correct_streak + 1 if correct else 0,
            average_response_time=(
                sub_skill.average_response_time * attempts + interaction.time_spent_seconds
            ) / (attempts + 1),
        )
    else:
        logger.debug("Skipping unknown sub-skill '{}'", interaction.sub_skill_id)

    topic = new_skills.get(interaction.topic_id)
    if topic is not None:
        parent_params = replace(
            params,
            p_slip=params.p_slip + PARENT_DILUTION,
            p_guess=params.p_guess + PARENT_DILUTION,
        )
        new_skills[topic.id] = replace(
            topic,
            mastery_probability=_traced_mastery(topic, interaction, parent_params, expected_times),
            total_attempts=topic.total_attempts + 1,
            correct_streak=topic.correct_streak + 1 if correct else 0,
        )
    else:
        logger.debug("Skipping unknown topic '{}'", interaction.topic_id)

    return new_skills


def apply_interactions(
    skills: Mapping[str, SkillNode],
    interactions: Iterable[Interaction],
    params: BKTParams = DEFAULT_PARAMS,
    expected_times: Mapping[Difficulty, float] = EXPECTED_TIME,
) -> dict[str, SkillNode]:
    """Fold a batch (e.g. a finished mock exam) left to right."""
    result = dict(skills)
    for interaction in interactions:
        result = update_knowledge(result, interaction, params, expected_times)
    return result


def difficulty_for_mastery(p_mastery: float) -> Difficulty:
    for floor, difficulty in DIFFICULTY_THRESHOLDS:
        if p_mastery >= floor:
            return difficulty
    return Difficulty.BASIC


__all__ = [
    "DIFFICULTY_THRESHOLDS",
    "MAX_MASTERY",
    "MIN_MASTERY",
    "PARENT_DILUTION",
    "adjust_for_time",
    "apply_interactions",
    "bkt_update",
    "clamp_mastery",
    "difficulty_for_mastery",
    "update_knowledge",
]
