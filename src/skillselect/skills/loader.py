"""
Skill loader with progressive disclosure.

Implements the three-level loading strategy:
1. Metadata only (listing) - name and description per skill
2. Full body (when activated) - wrapped for injection into agent context
3. Reference files (as needed) - loaded on demand and cached
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing

import skillselect.skills.skill as skill_module


class SkillLoader:
    """
    Loader for progressive skill content disclosure.

    Skills are loaded in stages:
    - Level 1: Metadata only (name + description)
    - Level 2: Full skill body when a skill is activated
    - Level 3: Reference files loaded as needed
    """

    def __init__(
        self, skills: _typing.Mapping[str, skill_module.Skill] | None = None
    ) -> None:
        """
        Initialize the skill loader.

        Args:
            skills: Skills by name, in declaration order.
        """
        self._skills: _typing.Mapping[str, skill_module.Skill] = skills or {}
        self._loaded_refs: dict[str, dict[str, str]] = {}  # skill -> file -> content

    def get_skill(self, name: str) -> skill_module.Skill | None:
        """Get a skill by name."""
        return self._skills.get(name)

    def list_skills(self) -> list[skill_module.Skill]:
        """List all available skills."""
        return list(self._skills.values())

    # Level 1: Metadata
    def get_all_metadata(self) -> str:
        """
        Get metadata for all skills (Level 1).

        Returns:
            Markdown block listing each skill's name and description,
            or an empty string when there are no skills.
        """
        if not self._skills:
            return ""

        lines = ["## Available Skills", ""]
        for skill in sorted(self._skills.values(), key=lambda s: s.name):
            lines.append(f"- {skill.get_metadata_for_prompt()}")
        lines.append("")
        lines.append(
            "Skills activate automatically when a request mentions their "
            "trigger keywords, or explicitly with /skill <name>."
        )

        return "\n".join(lines)

    def get_skill_metadata(self, name: str) -> str | None:
        """Get metadata for a specific skill, or None if not found."""
        skill = self._skills.get(name)
        if skill is None:
            return None
        return skill.get_metadata_for_prompt()

    # Level 2: Full body when activated
    def get_skill_body(self, name: str) -> str | None:
        """Get the raw skill body, or None if not found."""
        skill = self._skills.get(name)
        if skill is None:
            return None
        return skill.get_full_content()

    @staticmethod
    def wrap(skill: skill_module.Skill) -> str:
        """Wrap a skill body in tags naming the skill."""
        return f'<skill name="{skill.name}">\n{skill.get_full_content()}\n</skill>'

    def trigger_skill(self, name: str) -> str | None:
        """
        Activate a skill and get its content for injection.

        Args:
            name: Skill name.

        Returns:
            Skill content wrapped in <skill> tags, or None if not found.
        """
        skill = self._skills.get(name)
        if skill is None:
            return None
        return self.wrap(skill)

    def render_context(self, skills: _typing.Iterable[skill_module.Skill]) -> str:
        """
        Render several activated skills as one context block.

        Skills appear in the order given (typically selection order).
        """
        return "\n\n".join(self.wrap(skill) for skill in skills)

    # Level 3: Reference files on demand
    def get_reference_file(self, skill_name: str, filename: str) -> str | None:
        """
        Get a reference file from a skill (Level 3).

        Args:
            skill_name: Skill name.
            filename: Path relative to the skill directory
                (e.g. "examples.md" or "references/api.md").

        Returns:
            File content, or None if not found or outside the skill directory.
        """
        skill = self._skills.get(skill_name)
        if skill is None:
            return None

        cached = self._loaded_refs.get(skill_name, {})
        if filename in cached:
            return cached[filename]

        skill_root = skill.path.resolve()
        ref_path = (skill_root / filename).resolve()
        if not ref_path.is_relative_to(skill_root) or not ref_path.is_file():
            return None

        try:
            content = ref_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

        self._loaded_refs.setdefault(skill_name, {})[filename] = content
        return content

    def list_reference_files(self, skill_name: str) -> list[str]:
        """List reference file names for a skill."""
        skill = self._skills.get(skill_name)
        if skill is None:
            return []
        return [f.name for f in skill.list_reference_files()]

    def list_scripts(self, skill_name: str) -> list[str]:
        """List script file names for a skill."""
        skill = self._skills.get(skill_name)
        if skill is None:
            return []
        return [s.name for s in skill.list_scripts()]

    def get_script_path(self, skill_name: str, script_name: str) -> _pathlib.Path | None:
        """Get the path to a script in a skill, or None if not found."""
        skill = self._skills.get(skill_name)
        if skill is None:
            return None

        script_path = skill.path / "scripts" / script_name
        if script_path.is_file():
            return script_path
        return None

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "skill_count": len(self._skills),
            "skills": [s.name for s in self._skills.values()],
            "cached_refs": {
                name: list(files.keys())
                for name, files in self._loaded_refs.items()
            },
        }
