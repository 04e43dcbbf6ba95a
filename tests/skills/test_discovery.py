"""
Tests for skill discovery.

Tests verify that:
- Skills are discovered from builtin, global, env, and project paths
- Later sources override earlier sources by name
- Directories without SKILL.md and invalid skills are skipped and reported
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import skillselect.skills.discovery as discovery


class TestSkillSearchPaths:
    """Tests for get_skill_search_paths function."""

    def test_includes_builtin_path_first(self) -> None:
        """Builtin skills path is included first (lowest priority)."""
        paths = discovery.get_skill_search_paths()
        assert paths[0] == discovery.get_builtin_skills_path()

    def test_includes_global_path_second(self) -> None:
        """Global skills path is included second."""
        paths = discovery.get_skill_search_paths()
        assert paths[1] == discovery.get_global_skills_path()

    def test_includes_project_path_last(self, tmp_path: _pathlib.Path) -> None:
        """Project-local path is included last (highest priority)."""
        paths = discovery.get_skill_search_paths(tmp_path)
        assert paths[-1] == discovery.get_project_skills_path(tmp_path)

    def test_includes_env_paths_in_middle(self, tmp_path: _pathlib.Path) -> None:
        """SKILLSELECT_SKILL_PATH env var paths are included."""
        env_path1 = tmp_path / "env1"
        env_path2 = tmp_path / "env2"
        env_path1.mkdir()
        env_path2.mkdir()

        with _mock.patch.dict(
            _os.environ, {"SKILLSELECT_SKILL_PATH": f"{env_path1}:{env_path2}:"}
        ):
            paths = discovery.get_skill_search_paths(tmp_path)

        assert paths[0] == discovery.get_builtin_skills_path()
        assert paths[2:4] == [env_path1.resolve(), env_path2.resolve()]
        assert paths[-1] == discovery.get_project_skills_path(tmp_path)

    def test_can_exclude_builtin(self) -> None:
        """Builtin skills can be excluded."""
        paths = discovery.get_skill_search_paths(include_builtin=False)
        assert discovery.get_builtin_skills_path() not in paths
        assert paths[0] == discovery.get_global_skills_path()


class TestSkillDiscovery:
    """Tests for SkillDiscovery class."""

    def test_discovers_skills_in_directory(self, tmp_path: _pathlib.Path, skill_writer) -> None:
        """Skills in search path are discovered in directory-name order."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "skill-b")
        skill_writer(skills_dir, "skill-a")

        result = discovery.SkillDiscovery(search_paths=[skills_dir]).discover()

        assert [s.name for s in result.skills] == ["skill-a", "skill-b"]
        assert result.skipped == []

    def test_later_sources_override_earlier_by_name(
        self, tmp_path: _pathlib.Path, skill_writer
    ) -> None:
        """Skill with same name from later source replaces earlier."""
        global_dir = tmp_path / "global"
        project_dir = tmp_path / "project"
        skill_writer(global_dir, "shared-skill", "Global version")
        skill_writer(global_dir, "zeta", "Only global")
        skill_writer(project_dir, "shared-skill", "Project version")

        result = discovery.SkillDiscovery(search_paths=[global_dir, project_dir]).discover()

        assert [s.name for s in result.skills] == ["shared-skill", "zeta"]
        assert result.skills[0].description == "Project version"

    def test_same_root_duplicates_are_kept_for_validation(
        self, tmp_path: _pathlib.Path, skill_writer
    ) -> None:
        """Two directories declaring the same name in one root are both returned."""
        root = tmp_path / "skills"
        skill_writer(root, "dup", dir_name="dup-one")
        skill_writer(root, "dup", dir_name="dup-two")

        result = discovery.SkillDiscovery(search_paths=[root]).discover()

        assert [s.path.name for s in result.skills] == ["dup-one", "dup-two"]

    def test_skips_directories_without_skill_md(
        self,
        tmp_path: _pathlib.Path,
        skill_writer,
        caplog: _pytest.LogCaptureFixture,
    ) -> None:
        """Directories without SKILL.md are skipped with a warning."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "valid-skill")
        (skills_dir / "not-a-skill").mkdir()
        (skills_dir / "not-a-skill" / "README.md").write_text("Not a skill")

        with caplog.at_level(_logging.WARNING, logger="skillselect"):
            result = discovery.SkillDiscovery(search_paths=[skills_dir]).discover()

        assert [s.name for s in result.skills] == ["valid-skill"]
        assert len(result.skipped) == 1
        assert result.skipped[0].path == skills_dir / "not-a-skill"
        assert isinstance(result.skipped[0].error, FileNotFoundError)
        assert "not-a-skill" in caplog.text

    def test_skips_invalid_skills(self, tmp_path: _pathlib.Path, skill_writer) -> None:
        """Skills with invalid SKILL.md are skipped and reported."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "valid-skill")
        bad_skill = skills_dir / "bad-skill"
        bad_skill.mkdir()
        (bad_skill / "SKILL.md").write_text("no frontmatter")

        result = discovery.SkillDiscovery(search_paths=[skills_dir]).discover()

        assert [s.name for s in result.skills] == ["valid-skill"]
        assert [s.error_type for s in result.skipped] == ["MalformedSkillError"]

    def test_ignores_files_and_hidden_directories(
        self, tmp_path: _pathlib.Path, skill_writer
    ) -> None:
        """Only visible immediate subdirectories are skill candidates."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "valid-skill")
        (skills_dir / "notes.txt").write_text("x")
        (skills_dir / ".cache").mkdir()

        result = discovery.SkillDiscovery(search_paths=[skills_dir]).discover()

        assert [s.name for s in result.skills] == ["valid-skill"]
        assert result.skipped == []

    def test_pycache_ignored_but_underscore_dirs_scanned(
        self, tmp_path: _pathlib.Path, skill_writer
    ) -> None:
        """__pycache__ is skipped silently; other _-prefixed directories are candidates."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "valid-skill")
        skill_writer(skills_dir, "shared", dir_name="_shared")
        (skills_dir / "__pycache__").mkdir()
        (skills_dir / "_drafts").mkdir()

        result = discovery.SkillDiscovery(search_paths=[skills_dir]).discover()

        assert [s.name for s in result.skills] == ["shared", "valid-skill"]
        assert [e.path.name for e in result.skipped] == ["_drafts"]
        assert isinstance(result.skipped[0].error, FileNotFoundError)

    def test_unreadable_skill_document_is_skipped(
        self, tmp_path: _pathlib.Path, skill_writer
    ) -> None:
        """A SKILL.md that cannot be read is reported without aborting the scan."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "good")
        skill_writer(skills_dir, "locked")
        original_read_text = _pathlib.Path.read_text

        def read_text(self, *args, **kwargs):
            if self.parent.name == "locked":
                raise PermissionError(13, "Permission denied", str(self))
            return original_read_text(self, *args, **kwargs)

        with _mock.patch.object(_pathlib.Path, "read_text", read_text):
            result = discovery.SkillDiscovery(search_paths=[skills_dir]).discover()

        assert [s.name for s in result.skills] == ["good"]
        assert [e.path.name for e in result.skipped] == ["locked"]
        assert result.skipped[0].error_type == "PermissionError"

    def test_unreadable_search_path_is_skipped(
        self, tmp_path: _pathlib.Path, skill_writer
    ) -> None:
        """A root that cannot be listed is reported and other roots still load."""
        locked = tmp_path / "locked"
        other = tmp_path / "other"
        skill_writer(locked, "hidden")
        skill_writer(other, "visible")
        original_iterdir = _pathlib.Path.iterdir

        def iterdir(self):
            if self == locked:
                raise PermissionError(13, "Permission denied", str(self))
            return original_iterdir(self)

        with _mock.patch.object(_pathlib.Path, "iterdir", iterdir):
            result = discovery.SkillDiscovery(search_paths=[locked, other]).discover()

        assert [s.name for s in result.skills] == ["visible"]
        assert [e.path for e in result.skipped] == [locked]
        assert isinstance(result.skipped[0].error, PermissionError)

    def test_missing_search_path_is_ignored(self, tmp_path: _pathlib.Path) -> None:
        """A search root that does not exist yields nothing."""
        result = discovery.SkillDiscovery(search_paths=[tmp_path / "nope"]).discover()
        assert result.skills == []
        assert result.skipped == []

    def test_source_labels(self, tmp_path: _pathlib.Path, skill_writer) -> None:
        """Project roots are labelled project, others custom."""
        project_skills = discovery.get_project_skills_path(tmp_path)
        other = tmp_path / "other"
        skill_writer(project_skills, "local")
        skill_writer(other, "elsewhere")

        disc = discovery.SkillDiscovery(tmp_path, search_paths=[other, project_skills])
        sources = {s.name: s.source for s in disc.discover().skills}

        assert sources == {"elsewhere": "custom", "local": "project"}

    def test_builtin_skills_are_discovered(self) -> None:
        """The bundled skills load without errors."""
        disc = discovery.SkillDiscovery(search_paths=[discovery.get_builtin_skills_path()])
        result = disc.discover()

        names = {s.name for s in result.skills}
        assert {"pest-testing", "payment-method-development"} <= names
        assert result.skipped == []
        assert all(s.source == "builtin" for s in result.skills)

    def test_discover_all_with_errors(self, tmp_path: _pathlib.Path, skill_writer) -> None:
        """discover_all with include_errors yields exceptions."""
        skills_dir = tmp_path / "skills"
        skill_writer(skills_dir, "valid-skill")
        bad_skill = skills_dir / "bad-skill"
        bad_skill.mkdir()
        (bad_skill / "SKILL.md").write_text("invalid")

        disc = discovery.SkillDiscovery(search_paths=[skills_dir])
        results = list(disc.discover_all(include_errors=True))

        errors = [r for r in results if isinstance(r, tuple)]
        skills = [r for r in results if not isinstance(r, tuple)]
        assert len(errors) == 1
        assert len(skills) == 1


class TestHelperFunctions:
    """Tests for module-level helper functions."""

    def test_global_skills_path_is_in_config(self) -> None:
        """Global skills path is under ~/.config/skillselect/."""
        env = {k: v for k, v in _os.environ.items() if k != "SKILLSELECT_CONFIG_DIR"}
        with _mock.patch.dict(_os.environ, env, clear=True):
            path = discovery.get_global_skills_path()
        assert path.parts[-3:] == (".config", "skillselect", "skills")

    def test_global_skills_path_follows_config_dir(self, tmp_path: _pathlib.Path) -> None:
        """SKILLSELECT_CONFIG_DIR moves the global skills directory."""
        with _mock.patch.dict(_os.environ, {"SKILLSELECT_CONFIG_DIR": str(tmp_path)}):
            assert discovery.get_global_skills_path() == tmp_path / "skills"

    def test_project_skills_path(self, tmp_path: _pathlib.Path) -> None:
        """Project skills path is under .skillselect/skills/."""
        path = discovery.get_project_skills_path(tmp_path)
        assert path == tmp_path / ".skillselect" / "skills"
