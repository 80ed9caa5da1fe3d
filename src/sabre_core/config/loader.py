"""Sabre configuration loader."""

import logging
import os
import re
import typing
from collections.abc import Callable
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from sabre_core.errors import create_error
from sabre_core.types import FailurePolicy, LogFormat, LogLevel, ValidationIssue, ValidationResult

from .models import SabreConfig

CONFIG_PATH_ENV = "SABRE_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "sabre.yaml"

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([?-])([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Raises:
        SabreError(CONFIG_INVALID): If a required variable is not set
    """

    def replacer(match: re.Match[str]) -> str:
        var_name, operator, operand = match.groups()

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            raise create_error(
                "CONFIG_INVALID",
                detail=operand or f"Required environment variable {var_name} not set",
            )
        raise create_error(
            "CONFIG_INVALID",
            detail=f"Required environment variable {var_name} not set",
        )

    return _ENV_PATTERN.sub(replacer, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries; values from override win."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    if isinstance(data, str):
        resolved = resolve_env_vars(data)
        if resolved != data and _ENV_PATTERN.fullmatch(data):
            # A value that is only a reference takes the YAML type of its result
            return yaml.safe_load(resolved) if resolved.strip() else resolved
        return resolved
    return data


class ConfigLoader:
    """Load and validate Sabre configuration."""

    def __init__(self, logger: Any = None):
        """Initialize config loader.

        Args:
            logger: Optional SabreLogger instance
        """
        self._config: SabreConfig | None = None
        self._config_path: Path | None = None
        self._logger = logger
        self._change_callbacks: list[Callable[[SabreConfig], None]] = []

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> SabreConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. SABRE_CONFIG_PATH environment variable
        2. ./sabre.yaml
        3. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            use_defaults: Use the default config when no file is found

        Returns:
            Loaded SabreConfig instance

        Raises:
            SabreError(CONFIG_INVALID): If the file is missing (and
                use_defaults is False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                if self._logger:
                    self._logger._log(
                        LogLevel.INFO, "config", "No config file found, using default configuration"
                    )
                return self.load_defaults()
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration file must contain a mapping",
            )

        data = _resolve_env_vars_recursive(data)
        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> SabreConfig:
        """Default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> SabreConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for reload)

        Raises:
            SabreError(CONFIG_INVALID): If configuration is invalid
        """
        validation = self.validate(data)
        if not validation.valid:
            error_messages = [f"- {issue.path}: {issue.message}" for issue in validation.errors]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        try:
            config = self._dict_to_config(data)
        except (TypeError, ValueError) as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Failed to parse configuration: {e}",
            ) from e

        self._config = config
        self._config_path = config_path

        if self._logger:
            self._logger._log(LogLevel.INFO, "config", "Configuration loaded successfully")

        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Unknown keys are warnings; wrongly typed values are errors.
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        sections = [f.name for f in fields(SabreConfig)]
        for key in data:
            if key not in sections:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )

        for section in sections:
            if section in data and not isinstance(data[section], dict):
                errors.append(
                    ValidationIssue(path=section, message=f"{section} must be a dictionary")
                )

        engine = data.get("engine")
        if isinstance(engine, dict):
            if "enable_debug" in engine and not isinstance(engine["enable_debug"], bool):
                errors.append(
                    ValidationIssue(
                        path="engine.enable_debug", message="enable_debug must be a boolean"
                    )
                )
            extension = engine.get("default_file_extension")
            if extension is not None and (not isinstance(extension, str) or not extension.strip()):
                errors.append(
                    ValidationIssue(
                        path="engine.default_file_extension",
                        message="default_file_extension must be a non-empty string",
                    )
                )
            for key in ("namespaces", "module_references"):
                value = engine.get(key)
                if value is not None and (
                    not isinstance(value, list) or not all(isinstance(v, str) for v in value)
                ):
                    errors.append(
                        ValidationIssue(path=f"engine.{key}", message=f"{key} must be a list of strings")
                    )

        cache = data.get("cache")
        if isinstance(cache, dict):
            max_entries = cache.get("max_entries")
            if max_entries is not None and (
                isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries <= 0
            ):
                errors.append(
                    ValidationIssue(
                        path="cache.max_entries", message="max_entries must be a positive integer"
                    )
                )
            self._check_enum(cache, "failure_policy", FailurePolicy, "cache", errors)

        logging = data.get("logging")
        if isinstance(logging, dict):
            self._check_enum(logging, "level", LogLevel, "logging", errors)
            self._check_enum(logging, "format", LogFormat, "logging", errors)

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def get(self) -> SabreConfig:
        """Get current configuration.

        Raises:
            SabreError(CONFIG_INVALID): If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def reload(self) -> SabreConfig:
        """Reload configuration from the last loaded file and notify callbacks.

        Raises:
            SabreError(CONFIG_INVALID): If no config path set or reload fails
        """
        if self._config_path is None:
            raise create_error("CONFIG_INVALID", detail="No config path set, cannot reload")

        new_config = self.load(self._config_path)

        for callback in self._change_callbacks:
            try:
                callback(new_config)
            except Exception as e:
                if self._logger:
                    self._logger._log(LogLevel.ERROR, "config", f"Config change callback failed: {e}")
                else:
                    logger.error("Config change callback failed: %s", e)

        return new_config

    def on_change(self, callback: Callable[[SabreConfig], None]) -> None:
        """Register callback for config reloads."""
        self._change_callbacks.append(callback)

    def _check_enum(
        self,
        section: dict[str, Any],
        key: str,
        enum_type: type[Enum],
        section_name: str,
        errors: list[ValidationIssue],
    ) -> None:
        if key not in section:
            return
        allowed = [member.value for member in enum_type]
        if section[key] not in allowed:
            errors.append(
                ValidationIssue(
                    path=f"{section_name}.{key}",
                    message=f"{key} must be one of {allowed}",
                )
            )

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path)
        return Path(DEFAULT_CONFIG_FILE)

    def _dict_to_config(self, data: dict[str, Any]) -> SabreConfig:
        kwargs: dict[str, Any] = {}
        for f in fields(SabreConfig):
            if f.name in data:
                kwargs[f.name] = self._convert_field(f.type, data[f.name])
        return SabreConfig(**kwargs)

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert a raw YAML value to the declared field type."""
        if value is None:
            return None

        origin = typing.get_origin(field_type)

        if origin is list:
            args = typing.get_args(field_type)
            if args and isinstance(value, list):
                return [self._convert_field(args[0], item) for item in value]
            return value

        if origin is dict:
            args = typing.get_args(field_type)
            if len(args) == 2 and isinstance(value, dict):
                return {k: self._convert_field(args[1], v) for k, v in value.items()}
            return value

        if is_dataclass(field_type) and isinstance(value, dict):
            kwargs = {}
            for f in fields(field_type):
                if f.name in value:
                    kwargs[f.name] = self._convert_field(f.type, value[f.name])
            return field_type(**kwargs)

        if isinstance(field_type, type) and issubclass(field_type, Enum) and isinstance(value, str):
            return field_type(value)

        return value


_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get default config loader singleton."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> SabreConfig:
    """Convenience function to load config."""
    return get_config_loader().load(path)
