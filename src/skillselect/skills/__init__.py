"""
Skill registry and selection for skillselect.

Skills are instructional documents with activation metadata. They provide:
- Instructions that activate automatically when a request mentions
  their trigger keywords
- Progressive disclosure (only load what's needed)
- Optional scripts and reference materials

Skill discovery locations (in priority order):
1. Bundled builtin skills
2. ~/.config/skillselect/skills/ - User skills
3. $SKILLSELECT_SKILL_PATH - Custom paths (colon-separated)
4. Project .skillselect/skills/ - Project-local skills
"""

from skillselect.skills.discovery import (
    DiscoveryResult,
    SkillDiscovery,
    SkippedSkill,
    get_builtin_skills_path,
    get_global_skills_path,
    get_project_skills_path,
    get_skill_search_paths,
)
from skillselect.skills.keywords import extract_keywords
from skillselect.skills.loader import SkillLoader
from skillselect.skills.preprocessor import (
    SkillInjection,
    SkillPreprocessResult,
    format_skill_injection_message,
    preprocess_for_skills,
)
from skillselect.skills.registry import (
    EmptyDescriptorError,
    InvalidRegistryError,
    SkillRegistry,
    validate_skills,
)
from skillselect.skills.selector import (
    MATCH_MODES,
    MatchMode,
    SkillMatch,
    SkillSelector,
    select,
)
from skillselect.skills.skill import (
    MalformedSkillError,
    Skill,
    SkillFrontmatter,
    load_skill,
    parse_skill_markdown,
)

__all__ = [
    # Core
    "Skill",
    "SkillFrontmatter",
    # Parsing
    "MalformedSkillError",
    "extract_keywords",
    "load_skill",
    "parse_skill_markdown",
    # Discovery
    "DiscoveryResult",
    "SkillDiscovery",
    "SkippedSkill",
    "get_builtin_skills_path",
    "get_global_skills_path",
    "get_project_skills_path",
    "get_skill_search_paths",
    # Loader and Registry
    "EmptyDescriptorError",
    "InvalidRegistryError",
    "SkillLoader",
    "SkillRegistry",
    "validate_skills",
    # Selection
    "MATCH_MODES",
    "MatchMode",
    "SkillMatch",
    "SkillSelector",
    "select",
    # Preprocessing
    "SkillInjection",
    "SkillPreprocessResult",
    "format_skill_injection_message",
    "preprocess_for_skills",
]
