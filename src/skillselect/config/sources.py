"""Custom pydantic-settings source for skillselect configuration.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Project config: .skillselect/config.yaml in project root
3. User config: ~/.config/skillselect/config.yaml (or SKILLSELECT_CONFIG_DIR)
4. Built-in defaults: bundled defaults/config.yaml

The LayeredYamlSettingsSource handles layers 2-4, merging them so that
nested mappings merge key by key while other values override.
"""

import copy as _copy
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import skillselect.constants as constants


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def get_user_config_dir() -> _pathlib.Path:
    """User config directory, honouring SKILLSELECT_CONFIG_DIR."""
    override = _os.environ.get(constants.ENV_CONFIG_DIR)
    if override:
        return _pathlib.Path(override).expanduser()
    return _pathlib.Path.home() / ".config" / constants.APP_DIR_NAME


def get_builtin_config_path() -> _pathlib.Path:
    """Path to the bundled defaults file."""
    return _pathlib.Path(__file__).parent / "defaults" / "config.yaml"


def deep_merge(
    base: _typing.Mapping[str, _typing.Any],
    override: _typing.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Nested mappings merge recursively; any other value in ``override``
    (lists included) replaces the base value.
    """
    merged: dict[str, _typing.Any] = _copy.deepcopy(dict(base))
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, _typing.Mapping):
            merged[key] = deep_merge(existing, value)
        else:
            merged[key] = _copy.deepcopy(value)
    return merged


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that loads from layered YAML config files.

    Layers (lowest to highest precedence):
    1. Built-in defaults (src/skillselect/config/defaults/config.yaml)
    2. User config (~/.config/skillselect/config.yaml)
    3. Project config (.skillselect/config.yaml)
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
        builtin_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Optional project root path for project-level config.
            user_config_path: Override path for user config file (for testing).
            builtin_config_path: Override path for builtin defaults (for testing).
        """
        super().__init__(settings_cls)
        self._project_root = project_root
        self._user_config_path = user_config_path
        self._builtin_config_path = builtin_config_path
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._data = self._load_config_layers()

    def _get_user_config_path(self) -> _pathlib.Path:
        if self._user_config_path is not None:
            return self._user_config_path
        return get_user_config_dir() / "config.yaml"

    def _get_builtin_config_path(self) -> _pathlib.Path:
        if self._builtin_config_path is not None:
            return self._builtin_config_path
        return get_builtin_config_path()

    def _get_project_config_path(self) -> _pathlib.Path | None:
        if self._project_root is None:
            return None
        return self._project_root / constants.PROJECT_DIR_NAME / "config.yaml"

    @staticmethod
    def _load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any]:
        """Load one YAML file; an empty file yields an empty dict."""
        try:
            content = path.read_text(encoding="utf-8")
            data = _yaml.safe_load(content)
        except OSError as e:
            raise ConfigFileError(path, f"cannot read file: {e}") from e
        except _yaml.YAMLError as e:
            raise ConfigFileError(path, f"invalid YAML: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigFileError(path, "top level must be a mapping")
        return data

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        """Load and merge all config layers, lowest precedence first."""
        builtin_path = self._get_builtin_config_path()
        if not builtin_path.exists():
            raise ConfigFileError(
                builtin_path,
                "built-in defaults not found (possible installation problem)",
            )
        merged = self._load_yaml_file(builtin_path)
        self._loaded_layers.append(("built-in", builtin_path))

        # Missing user and project configs are normal
        optional_layers = [("user", self._get_user_config_path())]
        project_path = self._get_project_config_path()
        if project_path is not None:
            optional_layers.append(("project", project_path))

        for layer_name, path in optional_layers:
            if not path.exists():
                continue
            content = self._load_yaml_file(path)
            if content:
                merged = deep_merge(merged, content)
                self._loaded_layers.append((layer_name, path))

        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers actually loaded, highest precedence first."""
        return list(reversed(self._loaded_layers))

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """Return (value, key, is_complex) for one top-level field."""
        value = self._data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        return _copy.deepcopy(self._data)
