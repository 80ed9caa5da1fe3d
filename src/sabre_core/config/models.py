"""Sabre configuration data models."""

from dataclasses import dataclass, field

from sabre_core.logging import LogConfig
from sabre_core.types import FailurePolicy, LogFormat, LogLevel


@dataclass
class EngineConfig:
    """Engine configuration."""

    enable_debug: bool = False
    default_file_extension: str = ".pyt"
    namespaces: list[str] = field(default_factory=list)  # Star-imported into templates
    module_references: list[str] = field(default_factory=list)


@dataclass
class CacheConfig:
    """Artifact cache configuration."""

    max_entries: int | None = None  # None = unbounded
    failure_policy: FailurePolicy = FailurePolicy.RETRY


@dataclass
class LoggingComponentsConfig:
    """Which components log."""

    compile: bool = True
    render: bool = True
    cache: bool = True


@dataclass
class LoggingOptionsConfig:
    """Logging output options."""

    show_params: bool = True
    truncate_at: int = 200


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    components: LoggingComponentsConfig = field(default_factory=LoggingComponentsConfig)
    options: LoggingOptionsConfig = field(default_factory=LoggingOptionsConfig)

    def to_log_config(self) -> LogConfig:
        return LogConfig(
            level=self.level,
            format=self.format,
            show_params=self.options.show_params,
            truncate_at=self.options.truncate_at,
            components={
                "compile": self.components.compile,
                "render": self.components.render,
                "cache": self.components.cache,
            },
        )


@dataclass
class SabreConfig:
    """Complete Sabre configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
