"""Configuration package for runtime settings and startup validation."""

from .settings import (
	SUPPORTED_ENVIRONMENT_NAMES,
	AppSettings,
	SettingsLoadError,
	config_build_registry_uri,
	config_load_database_url,
	config_load_settings,
)

__all__ = [
	"AppSettings",
	"SettingsLoadError",
	"SUPPORTED_ENVIRONMENT_NAMES",
	"config_build_registry_uri",
	"config_load_settings",
	"config_load_database_url",
]
