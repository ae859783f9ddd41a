from __future__ import annotations

from dataclasses import replace

import pytest

from study_tracer.models import Difficulty, Interaction, SubSkillDef, TopicDef
from study_tracer.placement import apply_placement, placement_mastery
from study_tracer.skills import build_skill_map


@pytest.fixture
def topics() -> list[TopicDef]:
    return [
        TopicDef(
            id="intro_counting",
            name="Counting",
            sub_skills=(
                SubSkillDef(id="pfc_morgado", name="PFC", parent_id="intro_counting"),
                SubSkillDef(id="pfc_restrictions", name="Restrictions", parent_id="intro_counting"),
            ),
        ),
        TopicDef(
            id="permutations",
            name="Permutations",
            sub_skills=(SubSkillDef(id="perm_simple", name="Simple", parent_id="permutations"),),
        ),
    ]


def _results(correct: int, total: int = 4) -> list[Interaction]:
    return [
        Interaction(
            topic_id="intro_counting",
            sub_skill_id="pfc_morgado",
            is_correct=i < correct,
            time_spent_seconds=60,
            difficulty=Difficulty.BASIC,
        )
        for i in range(total)
    ]


@pytest.mark.parametrize("correct, expected", [(4, 0.65), (3, 0.65), (2, 0.45), (1, 0.15), (0, 0.15)])
def test_placement_mastery_levels(correct, expected):
    assert placement_mastery(_results(correct)) == expected


def test_placement_raises_topics_and_sub_skills(topics):
    skills = build_skill_map(topics)
    placed = apply_placement(skills, topics[:1], _results(3))
    assert placed["intro_counting"].mastery_probability == 0.65
    assert placed["pfc_morgado"].mastery_probability == 0.65
    assert placed["pfc_restrictions"].mastery_probability == 0.65
    # topics outside the placed module are untouched
    assert placed["permutations"] == skills["permutations"]
    assert skills["intro_counting"].mastery_probability == 0.10


def test_placement_never_regresses(topics):
    skills = build_skill_map(topics)
    skills["intro_counting"] = replace(skills["intro_counting"], mastery_probability=0.8)
    placed = apply_placement(skills, topics, _results(0))
    assert placed["intro_counting"].mastery_probability == 0.8
    assert placed["pfc_morgado"].mastery_probability == 0.8
    assert placed["permutations"].mastery_probability == 0.15


def test_placement_keeps_stronger_sub_skill(topics):
    skills = build_skill_map(topics)
    skills["pfc_morgado"] = replace(skills["pfc_morgado"], mastery_probability=0.9)
    placed = apply_placement(skills, topics[:1], _results(0))
    assert placed["pfc_morgado"].mastery_probability == 0.9
    assert placed["intro_counting"].mastery_probability == 0.15
    assert placed["pfc_restrictions"].mastery_probability == 0.15


def test_placement_lifts_sub_skills_to_topic(topics):
    skills = build_skill_map(topics)
    skills["intro_counting"] = replace(skills["intro_counting"], mastery_probability=0.7)
    skills["pfc_morgado"] = replace(skills["pfc_morgado"], mastery_probability=0.5)
    placed = apply_placement(skills, topics[:1], _results(3))
    assert placed["intro_counting"].mastery_probability == 0.7
    assert placed["pfc_morgado"].mastery_probability == 0.7


def test_no_node_regresses_on_retake(topics):
    skills = build_skill_map(topics)
    skills = apply_placement(skills, topics, _results(4))
    retaken = apply_placement(skills, topics, _results(0))
    for skill_id, node in skills.items():
        assert retaken[skill_id].mastery_probability >= node.mastery_probability


def test_placement_skips_missing_nodes(topics):
    skills = build_skill_map(topics)
    del skills["permutations"]
    del skills["pfc_restrictions"]
    placed = apply_placement(skills, topics, _results(2))
    assert "permutations" not in placed
    assert "pfc_restrictions" not in placed
    assert placed["pfc_morgado"].mastery_probability == 0.45
