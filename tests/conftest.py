"""
Shared pytest fixtures for skillselect tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import skillselect.config as config
import skillselect.skills.skill as skill

# Environment keys that should be cleared for isolated tests
ENV_PREFIXES_TO_CLEAR = ("SKILLSELECT_",)


@_pytest.fixture
def clean_env(tmp_path: _pathlib.Path) -> dict[str, str]:
    """
    Return environment dict with skillselect keys removed.

    The user config directory points at an empty temporary directory so
    that a real ~/.config/skillselect never leaks into tests.
    """
    env = {
        k: v
        for k, v in _os.environ.items()
        if not k.startswith(ENV_PREFIXES_TO_CLEAR)
    }
    user_config = tmp_path / "user-config"
    user_config.mkdir(exist_ok=True)
    env["SKILLSELECT_CONFIG_DIR"] = str(user_config)
    return env


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def clean_settings(isolated_env) -> config.Settings:
    """Settings instance isolated from environment and .env file."""
    with isolated_env:
        return config.Settings.construct_without_dotenv()


def write_skill(
    parent: _pathlib.Path,
    name: str,
    description: str = "Test skill",
    *,
    triggers: list[str] | None = None,
    body: str | None = None,
    dir_name: str | None = None,
) -> _pathlib.Path:
    """Create a skill directory with a SKILL.md document."""
    skill_dir = parent / (dir_name or name)
    skill_dir.mkdir(parents=True, exist_ok=True)
    header = [f"name: {name}", f"description: {description}"]
    if triggers is not None:
        header.append(f"triggers: [{', '.join(triggers)}]")
    if body is None:
        body = f"# {name}\n\nInstructions for {name}."
    (skill_dir / "SKILL.md").write_text(
        "---\n" + "\n".join(header) + "\n---\n\n" + body + "\n",
        encoding="utf-8",
    )
    return skill_dir


@_pytest.fixture
def skill_tree(tmp_path: _pathlib.Path) -> _typing.Callable[..., _pathlib.Path]:
    """
    Factory writing a skill directory under ``tmp_path/skills``.

    Usage:
        def test_x(skill_tree):
            skill_tree("pest-testing", triggers=["test", "tdd"])
    """
    root = tmp_path / "skills"
    root.mkdir(exist_ok=True)

    def _make(name: str, description: str = "Test skill", **kwargs: _typing.Any) -> _pathlib.Path:
        return write_skill(root, name, description, **kwargs)

    return _make


def make_skill(
    name: str,
    triggers: list[str] | None = None,
    *,
    description: str | None = None,
    body: str | None = None,
    path: _pathlib.Path | None = None,
) -> skill.Skill:
    """Build a Skill without touching the filesystem."""
    fm = skill.SkillFrontmatter(
        name=name,
        description=description or f"The {name} skill",
        triggers=triggers,
    )
    return skill.Skill(
        frontmatter=fm,
        body=body or f"Instructions for {name}.",
        path=path or _pathlib.Path("/skills") / name,
    )


@_pytest.fixture
def scenario_skills() -> list[skill.Skill]:
    """The two-skill registry used throughout the selection tests."""
    return [
        make_skill("pest-testing", ["test", "assertion", "tdd"]),
        make_skill("payment-method-development", ["payment", "stripe", "paypal"]),
    ]


@_pytest.fixture
def skill_factory() -> _typing.Callable[..., skill.Skill]:
    """Factory building in-memory Skill descriptors (see make_skill)."""
    return make_skill


@_pytest.fixture
def skill_writer() -> _typing.Callable[..., _pathlib.Path]:
    """Factory writing a skill directory under any parent (see write_skill)."""
    return write_skill
