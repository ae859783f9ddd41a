"""Skill catalog: YAML loader, hierarchy validation, initial skill map."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from . import config
from .models import BKTParams, SkillNode, SubSkillDef, TopicDef

_catalog_cache: list[TopicDef] | None = None


def load_catalog(path: Path | None = None) -> list[TopicDef]:
    """Parse YAML file and return the topic list. Cached in memory."""
    global _catalog_cache
    if _catalog_cache is not None and path is None:
        return _catalog_cache

    file_path = path or config.SKILLS_FILE
    with open(file_path) as f:
        raw = yaml.safe_load(f) or []
    if not isinstance(raw, list):
        raise ValueError(f"{file_path} must contain a list of topics at the top level")

    topics: list[TopicDef] = []
    for entry in raw:
        topic_id = _entry_id(entry, "topic")
        sub_entries = entry.get("sub_skills") or []
        if not isinstance(sub_entries, list):
            raise ValueError(f"Topic '{topic_id}' sub_skills must be a list")
        sub_skills: list[SubSkillDef] = []
        for sub in sub_entries:
            sub_id = _entry_id(sub, f"sub-skill of '{topic_id}'")
            sub_skills.append(
                SubSkillDef(
                    id=sub_id,
                    name=sub.get("name", sub_id),
                    parent_id=sub.get("parent_id", topic_id),
                )
            )
        topics.append(
            TopicDef(
                id=topic_id,
                name=entry.get("name", topic_id),
                description=entry.get("description", ""),
                module=entry.get("module", ""),
                sub_skills=tuple(sub_skills),
            )
        )

    validate_catalog(topics)
    logger.debug("Loaded {} topics from {}", len(topics), file_path)

    if path is None:
        _catalog_cache = topics
    return topics


def _entry_id(entry: Any, what: str) -> str:
    if not isinstance(entry, dict):
        raise ValueError(f"Each {what} entry must be a mapping, got {entry!r}")
    entry_id = entry.get("id")
    if not entry_id:
        raise ValueError(f"A {what} entry is missing its 'id'")
    return str(entry_id)


def clear_cache() -> None:
    """Clear the in-memory catalog cache."""
    global _catalog_cache
    _catalog_cache = None


def validate_catalog(topics: list[TopicDef]) -> None:
    """Raise ValueError on duplicate ids or a sub-skill filed under the wrong topic."""
    seen: set[str] = set()
    for topic in topics:
        if topic.id in seen:
            raise ValueError(f"Duplicate skill id '{topic.id}'")
        seen.add(topic.id)
        for sub in topic.sub_skills:
            if sub.id in seen:
                raise ValueError(f"Duplicate skill id '{sub.id}'")
            seen.add(sub.id)
            if sub.parent_id != topic.id:
                raise ValueError(
                    f"Sub-skill '{sub.id}' declares parent '{sub.parent_id}' "
                    f"but is listed under '{topic.id}'"
                )


def build_skill_map(
    topics: list[TopicDef] | None = None,
    params: BKTParams = config.DEFAULT_PARAMS,
) -> dict[str, SkillNode]:
    """Fresh skill map: every topic and sub-skill at p_init with zeroed counters."""
    if topics is None:
        topics = load_catalog()

    skills: dict[str, SkillNode] = {}
    for topic in topics:
        skills[topic.id] = SkillNode(
            id=topic.id,
            name=topic.name,
            is_parent=True,
            mastery_probability=params.p_init,
            sub_skill_ids=tuple(sub.id for sub in topic.sub_skills),
        )
        for sub in topic.sub_skills:
            skills[sub.id] = SkillNode(
                id=sub.id,
                name=sub.name,
                is_parent=False,
                mastery_probability=params.p_init,
            )
    return skills


def parent_of(topics: list[TopicDef], sub_skill_id: str) -> str | None:
    for topic in topics:
        for sub in topic.sub_skills:
            if sub.id == sub_skill_id:
                return topic.id
    return None


def find_topic(topics: list[TopicDef], topic_id: str) -> TopicDef | None:
    for topic in topics:
        if topic.id == topic_id:
            return topic
    return None


def topics_for_module(topics: list[TopicDef], module: str) -> list[TopicDef]:
    """Topics of one study module, in catalog order."""
    return [topic for topic in topics if topic.module == module]


__all__ = [
    "build_skill_map",
    "clear_cache",
    "find_topic",
    "load_catalog",
    "parent_of",
    "topics_for_module",
    "validate_catalog",
]
