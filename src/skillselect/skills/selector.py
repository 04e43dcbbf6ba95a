"""
Skill selection.

Given free-text intent and a registry snapshot, pick the skills whose
trigger keywords appear in the intent. Selection is a pure, single-pass
scan: it performs no I/O and never mutates the registry, so concurrent
callers need no coordination.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import skillselect.constants as constants
import skillselect.skills.keywords as keywords
import skillselect.skills.skill as skill_module

if _typing.TYPE_CHECKING:
    import skillselect.config as _config

_logger = _logging.getLogger(__name__)

MatchMode = _typing.Literal["substring", "word"]
MATCH_MODES: tuple[str, ...] = ("substring", "word")


@_dataclasses.dataclass(frozen=True)
class SkillMatch:
    """One activated skill and the keywords that activated it."""

    skill: skill_module.Skill
    hits: tuple[str, ...]
    """Matched keywords, in the skill's keyword order."""

    position: int
    """Index of the skill in the registry (declaration order)."""

    @property
    def score(self) -> int:
        """Number of distinct keywords hit."""
        return len(self.hits)

    @property
    def name(self) -> str:
        return self.skill.name

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.skill.name,
            "score": self.score,
            "hits": list(self.hits),
            "description": self.skill.description,
        }


class SkillSelector:
    """
    Keyword matcher over an ordered collection of skills.

    Matches are ordered by descending number of distinct keyword hits;
    ties are broken by registry declaration order (``SkillMatch.position``).
    """

    def __init__(
        self,
        match_mode: MatchMode = constants.DEFAULT_MATCH_MODE,  # type: ignore[assignment]
        *,
        min_hits: int = 1,
        max_results: int | None = None,
    ) -> None:
        if match_mode not in MATCH_MODES:
            raise ValueError(
                f"Unknown match mode {match_mode!r} (expected one of {', '.join(MATCH_MODES)})"
            )
        if min_hits < 1:
            raise ValueError("min_hits must be at least 1")
        if max_results is not None and max_results < 0:
            raise ValueError("max_results must not be negative")
        self._match_mode = match_mode
        self._min_hits = min_hits
        self._max_results = max_results

    @classmethod
    def from_settings(cls, settings: _config.Settings) -> SkillSelector:
        """Build a selector from the ``selection`` config section."""
        selection = settings.selection
        return cls(
            selection.match_mode,
            min_hits=selection.min_hits,
            max_results=selection.max_results,
        )

    @property
    def match_mode(self) -> MatchMode:
        return self._match_mode

    def _hits(self, text: str, skill: skill_module.Skill) -> tuple[str, ...]:
        hits: list[str] = []
        for keyword in skill.trigger_keywords:
            needle = keywords.normalize(keyword)
            if not needle:
                continue
            if self._match_mode == "word":
                found = keywords.keyword_pattern(needle).search(text) is not None
            else:
                found = needle in text
            if found:
                hits.append(keyword)
        return tuple(hits)

    def match(
        self,
        intent_text: str,
        skills: _typing.Iterable[skill_module.Skill],
    ) -> list[SkillMatch]:
        """
        Score every skill against the intent.

        Args:
            intent_text: Free-text request; empty text matches nothing.
            skills: Registry snapshot in declaration order.

        Returns:
            Matches, best first.
        """
        text = keywords.normalize(intent_text or "")
        if not text:
            return []

        matches: list[SkillMatch] = []
        for position, skill in enumerate(skills):
            hits = self._hits(text, skill)
            if len(hits) >= self._min_hits:
                matches.append(SkillMatch(skill=skill, hits=hits, position=position))

        # equal scores keep declaration order
        matches.sort(key=lambda m: (-m.score, m.position))
        if self._max_results is not None:
            matches = matches[: self._max_results]

        _logger.debug(
            "Intent %r activated %s",
            intent_text,
            [f"{m.name}({m.score})" for m in matches],
        )
        return matches

    def select(
        self,
        intent_text: str,
        skills: _typing.Iterable[skill_module.Skill],
    ) -> list[skill_module.Skill]:
        """Like ``match`` but returns the skills only."""
        return [m.skill for m in self.match(intent_text, skills)]


def select(
    intent_text: str,
    registry: _typing.Iterable[skill_module.Skill],
) -> list[skill_module.Skill]:
    """
    Return the skills activated by ``intent_text``, best match first.

    Uses case-insensitive substring matching. ``registry`` may be a
    SkillRegistry or any ordered sequence of skills.
    """
    return SkillSelector().select(intent_text, registry)
