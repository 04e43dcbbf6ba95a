"""Configuration type definitions for skillselect settings.

This module defines the Pydantic models used to represent configuration
sections nested within the main Settings class:

- DiscoveryConfig: where skills are loaded from
- SelectionConfig: how intent is matched against trigger keywords
- LoggingConfig: log level for diagnostics

Design decision: All types use `extra="allow"` to preserve unknown fields.
This lets `config show` point out typos and unknown keys instead of
silently dropping them. Use `get_extra_fields()` to inspect unknown fields.
"""

import logging as _logging
import typing as _typing

import pydantic as _pydantic

import skillselect.constants as constants


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    Unknown fields are preserved rather than silently dropped.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}

    def has_extra_fields(self) -> bool:
        """Check if this config has any unrecognized fields."""
        return bool(self.model_extra)

    def collect_all_extra_fields(
        self,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Recursively collect extra fields from this config and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.
        ``{"selection.match_mdoe": "word"}``.
        """
        result: dict[str, _typing.Any] = {}

        for key, value in self.get_extra_fields().items():
            path = f"{prefix}.{key}" if prefix else key
            result[path] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, ConfigBase):
                child_prefix = f"{prefix}.{field_name}" if prefix else field_name
                result.update(value.collect_all_extra_fields(child_prefix))

        return result


class DiscoveryConfig(ConfigBase):
    """
    Skill discovery settings.

    YAML section: discovery.*
    """

    include_builtin: bool = True
    """Whether the bundled skills are part of the default search roots."""

    search_paths: list[str] = _pydantic.Field(default_factory=list)
    """Extra search roots, appended after the defaults (highest priority last)."""

    document_name: str = _pydantic.Field(
        default=constants.DEFAULT_DOCUMENT_NAME, min_length=1
    )
    """File every skill directory must contain."""

    @_pydantic.field_validator("search_paths", mode="before")
    @classmethod
    def _split_search_paths(cls, value: _typing.Any) -> _typing.Any:
        """Accept a colon-separated string (handy for env vars)."""
        if isinstance(value, str):
            return [p.strip() for p in value.split(":") if p.strip()]
        return value


class SelectionConfig(ConfigBase):
    """
    Skill selection settings.

    YAML section: selection.*
    """

    match_mode: _typing.Literal["substring", "word"] = constants.DEFAULT_MATCH_MODE  # type: ignore[assignment]
    """substring: keyword anywhere in the intent; word: whole words only."""

    min_hits: int = _pydantic.Field(default=1, ge=1)
    """Minimum distinct keyword hits for a skill to activate."""

    max_results: int | None = _pydantic.Field(default=None, ge=0)
    """Maximum number of skills returned (None for no limit)."""


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: str = "WARNING"
    """Standard logging level name."""

    @_pydantic.field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(_logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level
