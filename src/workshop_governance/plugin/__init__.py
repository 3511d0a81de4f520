"""Global configuration loading."""
from __future__ import annotations

from workshop_governance.plugin.config_loader import (
    CommandsConfig,
    ConfigLoader,
    ConfigProvider,
    DocumentsConfig,
    DocumentTemplates,
    FileConfigProvider,
    GlobalConfig,
    PermissionsConfig,
    StaticConfigProvider,
)

__all__ = [
    "CommandsConfig",
    "ConfigLoader",
    "ConfigProvider",
    "DocumentsConfig",
    "DocumentTemplates",
    "FileConfigProvider",
    "GlobalConfig",
    "PermissionsConfig",
    "StaticConfigProvider",
]
