"""
Skill definition and SKILL.md parsing.

Skills are defined by a SKILL.md file with YAML frontmatter.
The frontmatter contains metadata and activation triggers; the body
contains the instructions handed to an agent once the skill activates.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import functools as _functools
import logging as _logging
import pathlib as _pathlib
import re as _re
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import skillselect.constants as constants
import skillselect.skills.keywords as keywords

_logger = _logging.getLogger(__name__)

# Regex to extract YAML frontmatter from markdown
_FRONTMATTER_RE = _re.compile(
    r"^\ufeff?---\s*\n(.*?)\n---\s*\n?(.*)$",
    _re.DOTALL,
)


class MalformedSkillError(ValueError):
    """Raised when a skill document cannot be parsed into a descriptor."""


class SkillFrontmatter(_pydantic.BaseModel):
    """
    Frontmatter parsed from a SKILL.md file.

    Required fields:
    - name: Skill identifier (lowercase, hyphens allowed)
    - description: What the skill does AND when to use it

    Trigger keywords come from ``triggers`` when present, then from
    ``metadata.triggers``, and otherwise are extracted from the description.
    """

    model_config = _pydantic.ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    # Required fields
    name: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$",
        description="Skill name (lowercase, hyphens allowed)",
    )

    description: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=1024,
        description="What the skill does and when to use it",
    )

    # Optional fields
    license: str | None = _pydantic.Field(
        default=None,
        description="License for the skill",
    )

    triggers: list[str] | None = _pydantic.Field(
        default=None,
        description="Explicit trigger keywords (overrides extraction)",
    )

    allowed_tools: list[str] = _pydantic.Field(
        default_factory=list,
        alias="allowed-tools",
        description="Tools pre-approved for use with this skill",
    )

    metadata: dict[str, _typing.Any] = _pydantic.Field(
        default_factory=dict,
        description="Custom metadata for client-specific data",
    )

    @_pydantic.field_validator("triggers", mode="before")
    @classmethod
    def _coerce_triggers(cls, value: _typing.Any) -> _typing.Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(value, str):
            return value.split(",")
        return value

    @_pydantic.field_validator("metadata")
    @classmethod
    def _check_metadata_triggers(cls, value: dict[str, _typing.Any]) -> dict[str, _typing.Any]:
        """metadata.triggers, when given, must be a list of strings or a comma-separated string."""
        meta_triggers = value.get("triggers")
        if meta_triggers is None or isinstance(meta_triggers, str):
            return value
        if not isinstance(meta_triggers, list):
            raise ValueError(
                f"metadata.triggers must be a list, got {type(meta_triggers).__name__}"
            )
        for item in meta_triggers:
            if not isinstance(item, str):
                raise ValueError(
                    f"metadata.triggers items must be strings, got {item!r}"
                )
        return value

    def resolve_trigger_keywords(self) -> tuple[str, ...]:
        """
        Resolve the activation keywords for this skill.

        An explicitly declared list is used as-is (even when empty);
        extraction only happens when no list was declared at all.
        """
        if self.triggers is not None:
            return keywords.dedupe_keywords(self.triggers)

        meta_triggers = self.metadata.get("triggers")
        if isinstance(meta_triggers, str):
            return keywords.dedupe_keywords(meta_triggers.split(","))
        if meta_triggers is not None:
            return keywords.dedupe_keywords(meta_triggers)

        return keywords.extract_keywords(self.description)


@_dataclasses.dataclass(frozen=True)
class Skill:
    """
    A parsed skill descriptor.

    Descriptors are immutable: once loaded they are shared by every
    caller of the registry without copying.
    """

    frontmatter: SkillFrontmatter
    """Parsed frontmatter metadata."""

    body: str
    """Skill instructions (markdown body after frontmatter)."""

    path: _pathlib.Path
    """Path to skill directory."""

    source: str = "project"
    """Where the skill was discovered from (builtin, global, custom, project)."""

    document_name: str = constants.DEFAULT_DOCUMENT_NAME
    """Name of the document file inside the skill directory."""

    @property
    def name(self) -> str:
        """Skill name from frontmatter."""
        return self.frontmatter.name

    @property
    def description(self) -> str:
        """Skill description from frontmatter."""
        return self.frontmatter.description

    @property
    def license(self) -> str | None:
        """Skill license from frontmatter."""
        return self.frontmatter.license

    @property
    def allowed_tools(self) -> list[str]:
        """Pre-approved tools from frontmatter."""
        return self.frontmatter.allowed_tools

    @property
    def metadata(self) -> dict[str, _typing.Any]:
        """Custom metadata from frontmatter."""
        return self.frontmatter.metadata

    @_functools.cached_property
    def trigger_keywords(self) -> tuple[str, ...]:
        """Distinct keywords that activate this skill."""
        return self.frontmatter.resolve_trigger_keywords()

    @property
    def skill_file(self) -> _pathlib.Path:
        """Path to the skill document."""
        return self.path / self.document_name

    @property
    def body_line_count(self) -> int:
        """Number of lines in the skill body."""
        return len(self.body.splitlines())

    @property
    def exceeds_soft_limit(self) -> bool:
        """Whether body exceeds the soft limit."""
        return self.body_line_count > constants.SKILL_BODY_SOFT_LIMIT

    def list_reference_files(self) -> list[_pathlib.Path]:
        """
        List reference files shipped with the skill.

        Returns files in references/ plus any top-level .md files
        other than the skill document itself.
        """
        refs: list[_pathlib.Path] = []

        refs_dir = self.path / "references"
        if refs_dir.is_dir():
            for ref_file in sorted(refs_dir.iterdir()):
                if ref_file.is_file() and not ref_file.name.startswith("."):
                    refs.append(ref_file)

        if self.path.is_dir():
            for md_file in sorted(self.path.glob("*.md")):
                if md_file.name != self.document_name:
                    refs.append(md_file)

        return refs

    def list_scripts(self) -> list[_pathlib.Path]:
        """List files in the skill's scripts/ directory."""
        scripts_dir = self.path / "scripts"
        if not scripts_dir.is_dir():
            return []
        return [
            script
            for script in sorted(scripts_dir.iterdir())
            if script.is_file() and not script.name.startswith(".")
        ]

    def get_metadata_for_prompt(self) -> str:
        """Name and description only, for listing in a system prompt."""
        return f"**{self.name}**: {self.description}"

    def get_full_content(self) -> str:
        """The complete skill body."""
        return self.body

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "trigger_keywords": list(self.trigger_keywords),
            "path": str(self.path),
            "source": self.source,
            "license": self.license,
            "allowed_tools": self.allowed_tools,
            "metadata": self.metadata,
            "body_lines": self.body_line_count,
            "exceeds_limit": self.exceeds_soft_limit,
            "reference_files": [str(f) for f in self.list_reference_files()],
            "scripts": [str(s) for s in self.list_scripts()],
        }


def parse_skill_markdown(content: str) -> tuple[SkillFrontmatter, str]:
    """
    Parse a skill document into frontmatter and body.

    Args:
        content: Raw markdown content.

    Returns:
        Tuple of (frontmatter, body).

    Raises:
        MalformedSkillError: If frontmatter is missing or invalid, or the
            body is empty.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        raise MalformedSkillError("skill document must start with YAML frontmatter (---)")

    frontmatter_yaml = match.group(1)
    body = (match.group(2) or "").strip()

    try:
        data = _yaml.safe_load(frontmatter_yaml) or {}
    except _yaml.YAMLError as e:
        raise MalformedSkillError(f"Invalid YAML in frontmatter: {e}") from e

    if not isinstance(data, dict):
        raise MalformedSkillError("Frontmatter must be a mapping of key: value pairs")

    try:
        frontmatter = SkillFrontmatter.model_validate(data)
    except _pydantic.ValidationError as e:
        raise MalformedSkillError(f"Invalid skill frontmatter: {e}") from e

    if not body:
        raise MalformedSkillError(f"Skill '{frontmatter.name}' has no body after frontmatter")

    return frontmatter, body


def load_skill(
    skill_dir: _pathlib.Path,
    source: str = "project",
    *,
    document_name: str = constants.DEFAULT_DOCUMENT_NAME,
) -> Skill:
    """
    Load a skill from a directory.

    Args:
        skill_dir: Path to skill directory (must contain the document file).
        source: Where the skill was discovered from.
        document_name: Name of the document file.

    Returns:
        Parsed Skill instance.

    Raises:
        FileNotFoundError: If the document doesn't exist.
        MalformedSkillError: If the document is invalid.
        OSError: If the document cannot be read.
    """
    skill_file = skill_dir / document_name
    if not skill_file.is_file():
        raise FileNotFoundError(f"{document_name} not found: {skill_file}")

    try:
        content = skill_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedSkillError(f"{skill_file} is not valid UTF-8: {e}") from e

    frontmatter, body = parse_skill_markdown(content)

    line_count = len(body.splitlines())
    if line_count > constants.SKILL_BODY_SOFT_LIMIT:
        _logger.warning(
            "Skill %s exceeds recommended body limit (%d lines > %d)",
            frontmatter.name,
            line_count,
            constants.SKILL_BODY_SOFT_LIMIT,
        )

    return Skill(
        frontmatter=frontmatter,
        body=body,
        path=skill_dir.resolve(),
        source=source,
        document_name=document_name,
    )
