"""Global configuration loader with Pydantic v2 validation.

Loads and validates the workshop configuration file into a typed
:class:`GlobalConfig` object.  The file may be YAML or JSON (JSON is valid
YAML).  Keys use the camelCase spelling of the web application::

    documents:
      codingStandards: "Use type hints."
      templates:
        claudeMdTemplate: "..."
    permissions:
      templates:
        reviewer:
          fileSystem: {read: ["target/**"], write: ["feedback/**"]}
    commands:
      hotKeys: {investigate: "Ctrl+Shift+I"}

Unknown keys are allowed to support future schema additions without breakage.

Example
-------
>>> provider = FileConfigProvider(Path("workshop.yaml"))
>>> config = provider.load_config()
>>> sorted(config.permissions.templates)
['analyst', 'developer', 'reviewer']
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from workshop_governance.commands.model import UserCommand
from workshop_governance.permissions.defaults import default_role_templates
from workshop_governance.permissions.model import PermissionSet
from workshop_governance.templates.document_templates import get_template

logger = logging.getLogger(__name__)

_MODEL_CONFIG = {
    "extra": "allow",
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class DocumentTemplates(BaseModel):
    """Template text for each generated artifact."""

    model_config = _MODEL_CONFIG

    claude_md_template: str = Field(default_factory=lambda: get_template("claude_md"))
    permissions_template: str = Field(default_factory=lambda: get_template("permissions"))
    commands_template: str = Field(default_factory=lambda: get_template("commands"))


class DocumentsConfig(BaseModel):
    """Configuration for the instructions document."""

    model_config = _MODEL_CONFIG

    templates: DocumentTemplates = Field(default_factory=DocumentTemplates)
    coding_standards: str = Field(default="Follow standard best practices")


class PermissionsConfig(BaseModel):
    """Role templates keyed by role name."""

    model_config = _MODEL_CONFIG

    templates: dict[str, PermissionSet] = Field(default_factory=default_role_templates)


class CommandsConfig(BaseModel):
    """Globally available commands and their hot keys."""

    model_config = _MODEL_CONFIG

    global_commands: dict[str, UserCommand] = Field(default_factory=dict)
    hot_keys: dict[str, str] = Field(default_factory=dict)


class GlobalConfig(BaseModel):
    """Top-level workshop configuration schema.

    All sections are optional and fall back to sensible defaults.
    """

    model_config = _MODEL_CONFIG

    version: str = Field(default="1")
    documents: DocumentsConfig = Field(default_factory=DocumentsConfig)
    permissions: PermissionsConfig = Field(default_factory=PermissionsConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)


class ConfigProvider(Protocol):
    """Anything able to hand out the current :class:`GlobalConfig`."""

    def load_config(self) -> GlobalConfig: ...


class ConfigLoader:
    """Loads and validates workshop configuration files.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("workshop.yaml"))
    """

    def load(self, config_path: Path) -> GlobalConfig:
        """Load and validate a configuration file.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ValueError:
            When the content is not a mapping or fails Pydantic validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Workshop config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        if not isinstance(raw, dict):
            raise ValueError(f"Workshop config must be a mapping: {config_path}")
        return GlobalConfig.model_validate(raw)

    def load_string(self, yaml_content: str) -> GlobalConfig:
        """Load and validate a YAML string directly."""
        raw = yaml.safe_load(yaml_content) or {}
        if not isinstance(raw, dict):
            raise ValueError("Workshop config must be a mapping.")
        return GlobalConfig.model_validate(raw)

    def defaults(self) -> GlobalConfig:
        """Return a default configuration with all defaults applied."""
        return GlobalConfig()


class StaticConfigProvider:
    """Serves a fixed, already-built configuration."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        self._config = config or GlobalConfig()

    def load_config(self) -> GlobalConfig:
        return self._config


class FileConfigProvider:
    """Reads the configuration file on every call.

    A missing, unparseable or invalid file never raises: a warning is logged
    and the default configuration is returned instead.
    """

    def __init__(self, config_path: Path, loader: ConfigLoader | None = None) -> None:
        self._config_path = Path(config_path)
        self._loader = loader or ConfigLoader()

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load_config(self) -> GlobalConfig:
        try:
            return self._loader.load(self._config_path)
        except FileNotFoundError:
            logger.warning("Workshop config %s not found, using defaults", self._config_path)
        except (OSError, yaml.YAMLError, ValueError) as exc:
            logger.warning("Failed to load workshop config %s, using defaults: %s", self._config_path, exc)
        return self._loader.defaults()
