"""
Tests for skill selection.

Tests verify that:
- Skills are selected when their keywords appear in the intent
- Ordering is by hit count, ties keep registry order
- Matching is case-insensitive and deterministic
- Word mode requires keyword boundaries
"""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import skillselect.config as config
import skillselect.skills.registry as registry
import skillselect.skills.selector as selector


class TestSelect:
    """Tests for the module-level select function."""

    def test_more_hits_rank_first(self, scenario_skills) -> None:
        """Two hits beat one hit."""
        result = selector.select("tdd for stripe payment", scenario_skills)
        assert [s.name for s in result] == ["payment-method-development", "pest-testing"]

    def test_request_mentioning_two_domains(self, scenario_skills) -> None:
        """A request about tests and payments activates both skills."""
        result = selector.select(
            "I need to write a test for Stripe payment integration", scenario_skills
        )
        assert [s.name for s in result] == ["payment-method-development", "pest-testing"]

    def test_no_match_returns_empty(self, scenario_skills) -> None:
        """An intent without any keyword activates nothing."""
        assert selector.select("fix my database indexes", scenario_skills) == []

    def test_empty_intent_returns_empty(self, scenario_skills) -> None:
        """Empty or whitespace-only intent activates nothing."""
        assert selector.select("", scenario_skills) == []
        assert selector.select("   \n", scenario_skills) == []

    def test_empty_registry_returns_empty(self) -> None:
        assert selector.select("stripe payment", []) == []

    def test_case_insensitive(self, scenario_skills) -> None:
        """Keyword case and intent case do not matter."""
        result = selector.select("Add STRIPE Checkout", scenario_skills)
        assert [s.name for s in result] == ["payment-method-development"]

    def test_ties_keep_registry_order(self, skill_factory) -> None:
        """Equal scores are returned in declaration order."""
        skills = [
            skill_factory("zeta", ["deploy"]),
            skill_factory("alpha", ["release"]),
            skill_factory("mid", ["deploy", "release"]),
        ]
        result = selector.select("deploy the release", skills)
        assert [s.name for s in result] == ["mid", "zeta", "alpha"]

    def test_selection_is_deterministic(self, scenario_skills) -> None:
        """Repeated calls return the same list."""
        first = selector.select("tdd for stripe payment", scenario_skills)
        for _ in range(5):
            assert selector.select("tdd for stripe payment", scenario_skills) == first

    def test_selection_returns_subset_of_registry(self, scenario_skills) -> None:
        """Every returned skill comes from the registry, without repeats."""
        result = selector.select("test assertion tdd payment stripe paypal", scenario_skills)
        assert len(result) == len({s.name for s in result})
        assert all(s in scenario_skills for s in result)

    def test_accepts_registry(self, scenario_skills) -> None:
        """A SkillRegistry can be passed directly."""
        reg = registry.SkillRegistry.from_skills(scenario_skills)
        result = selector.select("write a pest test", reg)
        assert [s.name for s in result] == ["pest-testing"]

    def test_multi_word_keyword(self, skill_factory) -> None:
        """Multi-word keywords match across collapsed whitespace."""
        skills = [skill_factory("products", ["product type"])]
        assert selector.select("a new product\n   type please", skills) == skills


class TestSkillSelector:
    """Tests for SkillSelector options."""

    def test_match_reports_hits_and_score(self, scenario_skills) -> None:
        """Matches carry their hits in keyword order."""
        matches = selector.SkillSelector().match("stripe payment via tdd", scenario_skills)

        assert matches[0].name == "payment-method-development"
        assert matches[0].hits == ("payment", "stripe")
        assert matches[0].score == 2
        assert matches[0].position == 1
        assert matches[1].to_dict() == {
            "name": "pest-testing",
            "score": 1,
            "hits": ["tdd"],
            "description": "The pest-testing skill",
        }

    def test_equal_scores_ordered_by_position(self, skill_factory) -> None:
        """Within a score, matches come out by registry position."""
        skills = [
            skill_factory("zeta", ["deploy"]),
            skill_factory("alpha", ["release"]),
            skill_factory("mid", ["deploy", "release"]),
            skill_factory("beta", ["rollback"]),
        ]
        matches = selector.SkillSelector().match("rollback the release, then deploy", skills)

        assert [(m.name, m.score, m.position) for m in matches] == [
            ("mid", 2, 2),
            ("zeta", 1, 0),
            ("alpha", 1, 1),
            ("beta", 1, 3),
        ]

    def test_substring_mode_matches_inside_words(self, scenario_skills) -> None:
        """Default matching finds keywords inside longer words."""
        result = selector.SkillSelector().select("the latest build", scenario_skills)
        assert [s.name for s in result] == ["pest-testing"]

    def test_word_mode_requires_boundaries(self, scenario_skills) -> None:
        """Word mode does not match keywords inside longer words."""
        sel = selector.SkillSelector("word")
        assert sel.match_mode == "word"
        assert sel.select("the latest build", scenario_skills) == []
        assert [s.name for s in sel.select("run the test", scenario_skills)] == ["pest-testing"]

    def test_min_hits(self, scenario_skills) -> None:
        """Skills below min_hits are not selected."""
        sel = selector.SkillSelector(min_hits=2)
        result = sel.select("tdd for stripe payment", scenario_skills)
        assert [s.name for s in result] == ["payment-method-development"]

    def test_max_results(self, scenario_skills) -> None:
        """Results are truncated after ordering."""
        sel = selector.SkillSelector(max_results=1)
        result = sel.select("tdd for stripe payment", scenario_skills)
        assert [s.name for s in result] == ["payment-method-development"]
        assert selector.SkillSelector(max_results=0).select("tdd", scenario_skills) == []

    @_pytest.mark.parametrize(
        "kwargs",
        [
            {"match_mode": "fuzzy"},
            {"min_hits": 0},
            {"max_results": -1},
        ],
    )
    def test_invalid_options_raise(self, kwargs) -> None:
        with _pytest.raises(ValueError):
            selector.SkillSelector(**kwargs)

    def test_from_settings(self, isolated_env, tmp_path: _pathlib.Path) -> None:
        """Selector options come from the selection config section."""
        with isolated_env, _mock.patch.dict(
            _os.environ,
            {
                "SKILLSELECT_PROJECT_DIR": str(tmp_path),
                "SKILLSELECT_SELECTION__MATCH_MODE": "word",
                "SKILLSELECT_SELECTION__MAX_RESULTS": "3",
            },
        ):
            settings = config.Settings.construct_without_dotenv()

        sel = selector.SkillSelector.from_settings(settings)
        assert sel.match_mode == "word"
        assert sel._max_results == 3
        assert sel._min_hits == 1
