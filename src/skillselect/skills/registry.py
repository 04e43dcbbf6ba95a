"""
Skill registry for managing available skills.

The registry validates loaded descriptors once and then stays read-only
for the lifetime of the process. Invalid descriptors are skipped and
reported rather than aborting the whole load.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import types as _types
import typing as _typing

import skillselect.constants as constants
import skillselect.skills.discovery as discovery
import skillselect.skills.loader as loader
import skillselect.skills.selector as selector
import skillselect.skills.skill as skill_module

_logger = _logging.getLogger(__name__)


class InvalidRegistryError(ValueError):
    """Raised when descriptors conflict with each other (duplicate names)."""

    def __init__(self, name: str, paths: _typing.Sequence[_pathlib.Path]) -> None:
        self.name = name
        self.paths = list(paths)
        locations = ", ".join(str(p) for p in self.paths)
        super().__init__(f"Duplicate skill name '{name}' declared by: {locations}")


class EmptyDescriptorError(ValueError):
    """Raised when a descriptor has no trigger keywords and can never activate."""

    def __init__(self, name: str, path: _pathlib.Path) -> None:
        self.name = name
        self.path = path
        super().__init__(f"Skill '{name}' has no trigger keywords")


def validate_skills(
    skills: _typing.Iterable[skill_module.Skill],
    *,
    strict: bool = False,
) -> tuple[list[skill_module.Skill], list[discovery.SkippedSkill]]:
    """
    Check registry invariants over a list of descriptors.

    Every descriptor of a duplicated name is rejected, and so is any
    descriptor without trigger keywords.

    Args:
        skills: Descriptors in declaration order.
        strict: Raise the first violation instead of skipping.

    Returns:
        Tuple of (valid skills in declaration order, skipped entries).

    Raises:
        InvalidRegistryError: strict mode, duplicate names.
        EmptyDescriptorError: strict mode, descriptor without keywords.
    """
    skills = list(skills)
    groups: dict[str, list[skill_module.Skill]] = {}
    for skill in skills:
        groups.setdefault(skill.name, []).append(skill)

    valid: list[skill_module.Skill] = []
    skipped: list[discovery.SkippedSkill] = []
    reported: set[str] = set()

    for skill in skills:
        group = groups[skill.name]
        if len(group) > 1:
            if skill.name not in reported:
                reported.add(skill.name)
                error = InvalidRegistryError(skill.name, [s.path for s in group])
                if strict:
                    raise error
                _logger.warning("%s", error)
                skipped.extend(
                    discovery.SkippedSkill(path=s.path, error=error) for s in group
                )
            continue

        if not skill.trigger_keywords:
            empty = EmptyDescriptorError(skill.name, skill.path)
            if strict:
                raise empty
            _logger.warning("Skipping skill %s at %s: %s", skill.name, skill.path, empty)
            skipped.append(discovery.SkippedSkill(path=skill.path, error=empty))
            continue

        valid.append(skill)

    return valid, skipped


class SkillRegistry:
    """
    Immutable registry of validated skills.

    Handles:
    - Skill discovery from standard locations (via ``load``)
    - Validation of names and trigger keywords
    - Progressive skill loading
    - Skill matching against user intent
    """

    def __init__(
        self,
        skills: _typing.Iterable[skill_module.Skill] = (),
        *,
        skipped: _typing.Iterable[discovery.SkippedSkill] = (),
        search_paths: _typing.Iterable[_pathlib.Path] = (),
        project_root: _pathlib.Path | None = None,
        strict: bool = False,
    ) -> None:
        """
        Initialize the registry from already loaded descriptors.

        Args:
            skills: Descriptors in declaration order.
            skipped: Entries already skipped before validation (e.g. parse failures).
            search_paths: Roots the descriptors came from, for reporting.
            project_root: Project root used for discovery, for reporting.
            strict: Raise on the first invalid descriptor instead of skipping.
        """
        valid, rejected = validate_skills(skills, strict=strict)
        self._skills: tuple[skill_module.Skill, ...] = tuple(valid)
        self._by_name: _types.MappingProxyType[str, skill_module.Skill] = (
            _types.MappingProxyType({s.name: s for s in valid})
        )
        self._skipped: tuple[discovery.SkippedSkill, ...] = tuple(skipped) + tuple(rejected)
        self._search_paths = tuple(search_paths)
        self._project_root = project_root
        self._loader = loader.SkillLoader(self._by_name)

    @classmethod
    def from_skills(
        cls,
        skills: _typing.Iterable[skill_module.Skill],
        *,
        strict: bool = False,
    ) -> SkillRegistry:
        """Build a registry from descriptors without touching the filesystem."""
        return cls(skills, strict=strict)

    @classmethod
    def load(
        cls,
        project_root: _pathlib.Path | None = None,
        search_paths: _typing.Sequence[_pathlib.Path] | None = None,
        *,
        include_builtin: bool = True,
        document_name: str = constants.DEFAULT_DOCUMENT_NAME,
        strict: bool = False,
    ) -> SkillRegistry:
        """
        Discover skills on disk and build a registry from them.

        Args:
            project_root: Project root for skill discovery.
            search_paths: Custom search paths (overrides defaults).
            include_builtin: Whether default locations include bundled skills.
            document_name: File each skill directory must contain.
            strict: Raise on the first invalid descriptor instead of skipping.

        Returns:
            Loaded registry. Skipped directories are in ``skipped``.
        """
        disc = discovery.SkillDiscovery(
            project_root,
            search_paths,
            include_builtin=include_builtin,
            document_name=document_name,
        )
        result = disc.discover()
        registry = cls(
            result.skills,
            skipped=result.skipped,
            search_paths=disc.get_search_paths(),
            project_root=project_root,
            strict=strict,
        )
        _logger.debug(
            "Loaded %d skills (%d skipped)", len(registry), len(registry.skipped)
        )
        return registry

    # Skill listing
    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self) -> _typing.Iterator[skill_module.Skill]:
        return iter(self._skills)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def names(self) -> list[str]:
        """Skill names in declaration order."""
        return [s.name for s in self._skills]

    @property
    def skipped(self) -> list[discovery.SkippedSkill]:
        """Descriptors that failed to load or validate."""
        return list(self._skipped)

    @property
    def search_paths(self) -> list[_pathlib.Path]:
        """Roots the skills were discovered from."""
        return list(self._search_paths)

    @property
    def loader(self) -> loader.SkillLoader:
        """Progressive-disclosure loader over this registry."""
        return self._loader

    def list_skills(self) -> list[skill_module.Skill]:
        """List all valid skills in declaration order."""
        return list(self._skills)

    def get_skill(self, name: str) -> skill_module.Skill | None:
        """Get a skill by name."""
        return self._by_name.get(name)

    def has_skill(self, name: str) -> bool:
        """Check if a skill exists."""
        return name in self._by_name

    # Progressive loading interface
    def get_metadata_for_prompt(self) -> str:
        """Get all skill metadata for a system prompt (Level 1)."""
        return self._loader.get_all_metadata()

    def trigger_skill(self, name: str) -> str | None:
        """Get a skill's wrapped content for injection (Level 2)."""
        return self._loader.trigger_skill(name)

    def get_reference_file(self, skill_name: str, filename: str) -> str | None:
        """Get a reference file from a skill (Level 3)."""
        return self._loader.get_reference_file(skill_name, filename)

    # Skill matching
    def find_matching_skills(
        self,
        user_input: str,
        *,
        max_results: int | None = None,
        match_mode: selector.MatchMode = constants.DEFAULT_MATCH_MODE,  # type: ignore[assignment]
    ) -> list[skill_module.Skill]:
        """
        Find skills whose trigger keywords appear in user input.

        Args:
            user_input: User's message or request.
            max_results: Maximum number of skills to return (None for all).
            match_mode: "substring" or "word".

        Returns:
            Matching skills, most keyword hits first.
        """
        sel = selector.SkillSelector(match_mode=match_mode, max_results=max_results)
        return sel.select(user_input, self._skills)

    # Serialization
    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "project_root": str(self._project_root) if self._project_root else None,
            "search_paths": [str(p) for p in self._search_paths],
            "skill_count": len(self._skills),
            "skills": [s.to_dict() for s in self._skills],
            "skipped": [s.to_dict() for s in self._skipped],
        }
