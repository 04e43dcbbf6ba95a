"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with SKILLSELECT_ prefix
3. .env file (if SKILLSELECT_ENV_FILE points at one)
4. Layered YAML config files:
   - Project config: .skillselect/config.yaml (highest)
   - User config: ~/.config/skillselect/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  SKILLSELECT_SELECTION__MATCH_MODE=word
  SKILLSELECT_DISCOVERY__INCLUDE_BUILTIN=false
"""

import os as _os
import pathlib as _pathlib
import subprocess as _subprocess
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import skillselect.config.sources as sources
import skillselect.config.types as types
import skillselect.constants as constants


def _get_env_file() -> str | None:
    """Return SKILLSELECT_ENV_FILE if it names an existing file."""
    env_file = _os.environ.get(constants.ENV_ENV_FILE)
    if env_file and _pathlib.Path(env_file).exists():
        return env_file
    return None


def find_git_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path | None:
    """Find the git repository root from the given path or current directory."""
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    try:
        result = _subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            cwd=start_path,
            timeout=5,
        )
        if result.returncode == 0:
            return _pathlib.Path(result.stdout.strip())
    except (_subprocess.TimeoutExpired, FileNotFoundError, OSError):
        pass
    return None


def find_project_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path:
    """
    Find the project root directory.

    Tries (in order):
    1. Git repository root
    2. Nearest ancestor containing a .skillselect directory or a project marker
    3. The start directory
    """
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    git_root = find_git_root(start_path)
    if git_root:
        return git_root

    markers = [constants.PROJECT_DIR_NAME, "pyproject.toml", "composer.json", ".git"]
    current = start_path.resolve()
    while current != current.parent:
        if any((current / marker).exists() for marker in markers):
            return current
        current = current.parent

    return start_path.resolve()


class Settings(_pydantic_settings.BaseSettings):
    """
    skillselect configuration settings.

    All settings can be overridden via environment variables with the
    SKILLSELECT_ prefix. For nested config, use double underscore:
    SKILLSELECT_SELECTION__MAX_RESULTS=3
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="SKILLSELECT_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (SKILLSELECT_* env vars)
        3. dotenv_settings (.env file)
        4. layered YAML config
        5. field defaults, lowest
        """
        # init kwargs are not visible here, so only the env var can pin the root
        project_dir = _os.environ.get("SKILLSELECT_PROJECT_DIR")
        project_root = _pathlib.Path(project_dir) if project_dir else find_project_root()

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls, project_root),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    version: int = _pydantic.Field(default=1, description="Config schema version")

    discovery: types.DiscoveryConfig = _pydantic.Field(
        default_factory=types.DiscoveryConfig
    )
    """Where skills are loaded from."""

    selection: types.SelectionConfig = _pydantic.Field(
        default_factory=types.SelectionConfig
    )
    """How intent is matched against trigger keywords."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    project_dir: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Explicit project root (default: detected from cwd)",
    )

    _config_dir: _pathlib.Path = _pydantic.PrivateAttr()

    def model_post_init(self, __context: _typing.Any) -> None:
        super().model_post_init(__context)
        # directory the user YAML layer was read from
        self._config_dir = sources.get_user_config_dir()

    @property
    def project_root(self) -> _pathlib.Path:
        """Project root used for project-local skills and config."""
        if self.project_dir is not None:
            return self.project_dir
        return find_project_root()

    @property
    def config_dir(self) -> _pathlib.Path:
        """User config directory the settings were loaded from."""
        return self._config_dir

    def get_search_paths(self) -> list[_pathlib.Path]:
        """Extra skill search roots from config, expanded."""
        return [
            _pathlib.Path(p).expanduser().resolve()
            for p in self.discovery.search_paths
        ]

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Top-level fields not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}

    def collect_all_extra_fields(self) -> dict[str, _typing.Any]:
        """Unknown fields anywhere in the config, keyed by dotted path."""
        result = self.get_extra_fields()
        for section_name in ("discovery", "selection", "logging"):
            section = getattr(self, section_name)
            result.update(section.collect_all_extra_fields(section_name))
        return result

    def to_dict(self) -> dict[str, _typing.Any]:
        """Effective configuration as plain data."""
        return {
            "version": self.version,
            "project_root": str(self.project_root),
            "discovery": self.discovery.model_dump(),
            "selection": self.selection.model_dump(),
            "logging": self.logging.model_dump(),
        }
