"""
Skill preprocessing for user messages.

Handles explicit `/skill <name>` commands and automatic activation
through the selector. The result carries the skill content to inject
into the conversation ahead of the user's message.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import re as _re
import typing as _typing

import skillselect.skills.loader as skill_loader
import skillselect.skills.selector as skill_selector

if _typing.TYPE_CHECKING:
    import skillselect.skills.registry as skill_registry

_logger = _logging.getLogger(__name__)

# Matches: /skill name, /skill name rest of message
_SKILL_COMMAND_RE = _re.compile(
    r"^/skill\s+([a-z0-9][a-z0-9-]*[a-z0-9]|[a-z0-9])(?:\s+(.*))?$",
    _re.IGNORECASE | _re.DOTALL,
)

TriggerType = _typing.Literal["explicit", "auto"]


@_dataclasses.dataclass
class SkillInjection:
    """One skill's content ready for injection."""

    skill_name: str
    content: str
    hits: tuple[str, ...] = ()
    """Keywords that activated the skill (empty for explicit activation)."""


@_dataclasses.dataclass
class SkillPreprocessResult:
    """Result of preprocessing a user message for skills."""

    user_message: str
    """The user message (with any /skill command stripped)."""

    injections: list[SkillInjection] = _dataclasses.field(default_factory=list)
    """Skills to inject, in activation order."""

    trigger_type: TriggerType | None = None
    """How the skills were activated, or None if nothing activated."""

    error: str | None = None
    """Error message if an explicit skill lookup failed."""

    @property
    def skill_names(self) -> list[str]:
        return [i.skill_name for i in self.injections]

    @property
    def skill_injection(self) -> str | None:
        """All injected content as one block, or None."""
        if not self.injections:
            return None
        return "\n\n".join(i.content for i in self.injections)


def preprocess_for_skills(
    user_message: str,
    registry: skill_registry.SkillRegistry | None,
    selector: skill_selector.SkillSelector | None = None,
    *,
    auto_activate: bool = True,
) -> SkillPreprocessResult:
    """
    Preprocess a user message for skill activation.

    An explicit `/skill <name>` command wins; otherwise, when
    ``auto_activate`` is set, the selector picks skills from the message.

    Args:
        user_message: The raw user message.
        registry: Registry for skill lookup. If None, returns unchanged.
        selector: Selector for automatic activation (default substring matching).
        auto_activate: Whether to match keywords when no command is given.

    Returns:
        SkillPreprocessResult with zero or more injections.
    """
    if registry is None:
        return SkillPreprocessResult(user_message=user_message)

    match = _SKILL_COMMAND_RE.match(user_message.strip())
    if match:
        skill_name = match.group(1).lower()
        rest_of_message = (match.group(2) or "").strip()

        _logger.debug("Explicit skill command: /skill %s", skill_name)

        content = registry.trigger_skill(skill_name)
        if content is None:
            available = ", ".join(registry.names) or "(none)"
            return SkillPreprocessResult(
                user_message=user_message,
                trigger_type="explicit",
                error=f"Skill '{skill_name}' not found. Available: {available}",
            )

        return SkillPreprocessResult(
            user_message=rest_of_message,
            injections=[SkillInjection(skill_name=skill_name, content=content)],
            trigger_type="explicit",
        )

    if not auto_activate:
        return SkillPreprocessResult(user_message=user_message)

    selector = selector or skill_selector.SkillSelector()
    matches = selector.match(user_message, registry)
    if not matches:
        return SkillPreprocessResult(user_message=user_message)

    injections = [
        SkillInjection(
            skill_name=m.name,
            content=skill_loader.SkillLoader.wrap(m.skill),
            hits=m.hits,
        )
        for m in matches
    ]
    return SkillPreprocessResult(
        user_message=user_message,
        injections=injections,
        trigger_type="auto",
    )


def format_skill_injection_message(content: str, skill_name: str) -> str:
    """
    Format skill content for injection as a system message.

    Args:
        content: The skill body content.
        skill_name: Name of the skill.

    Returns:
        Formatted message for conversation injection.
    """
    return (
        f"[Skill '{skill_name}' activated - follow these instructions:]\n\n"
        f"{content}"
    )
