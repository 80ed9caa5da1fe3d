"""Sabre Logger - Colored or JSON logging for template compilation and rendering."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from sabre_core.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from sabre_core.types import LogFormat, LogLevel


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_params: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stdout)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = {
                "compile": True,
                "render": True,
                "cache": True,
            }


class SabreLogger:
    """Main logger facade. Creates component-specific loggers."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def compile(self, key: str, template_name: str | None = None) -> "CompileLogger":
        """Get a logger scoped to one compile request.

        Args:
            key: Cache key (logical name or fingerprint)
            template_name: Logical name, if the caller supplied one

        Returns:
            CompileLogger instance
        """
        return CompileLogger(self, key, template_name)

    def render(self, template_name: str | None) -> "RenderLogger":
        """Get a logger scoped to one render chain.

        Args:
            template_name: Logical name of the top-level template

        Returns:
            RenderLogger instance
        """
        return RenderLogger(self, template_name)

    def configure(self, config: LogConfig) -> None:
        """Update configuration.

        Args:
            config: New logger configuration
        """
        self.config = config

    def _should_log(self, level: LogLevel) -> bool:
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method.

        Args:
            level: Log level
            component: Component name (compile, render, cache)
            message: Log message
            context: Additional context data
        """
        if not self._should_log(level):
            return

        if not self.config.components.get(component, True):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.output)

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = {
            "compile": MAGENTA,
            "render": GREEN,
            "cache": ORANGE,
        }.get(component, RESET)

        # Format: [COMPONENT] message
        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_params:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)


class CompileLogger:
    """Logger for compile and cache events of one key."""

    def __init__(self, parent: SabreLogger, key: str, template_name: str | None):
        self.parent = parent
        self.key = key
        self.template_name = template_name

    def _context(self, event: str) -> dict[str, Any]:
        context: dict[str, Any] = {"key": self.key, "event": event}
        if self.template_name:
            context["template_name"] = self.template_name
        return context

    def cache_hit(self) -> None:
        """Log that an artifact was served from the cache."""
        self.parent._log(
            LogLevel.DEBUG,
            "cache",
            f"Artifact '{self.key}' served from cache",
            self._context("cache_hit"),
        )

    def started(self, file_name: str) -> None:
        """Log the start of a generate+compile cycle.

        Args:
            file_name: File name handed to the generator
        """
        context = self._context("compile_started")
        context["file_name"] = file_name
        self.parent._log(LogLevel.INFO, "compile", f"Compiling '{file_name}'", context)

    def completed(self, duration_ms: int, class_name: str) -> None:
        """Log a successful compile.

        Args:
            duration_ms: Generate+compile duration in milliseconds
            class_name: Name of the loaded template class
        """
        context = self._context("compile_completed")
        context["duration_ms"] = duration_ms
        context["class_name"] = class_name

        duration_s = duration_ms / 1000
        message = f"Compiled '{self.template_name or self.key}' ({duration_s:.2f}s) ✓"
        self.parent._log(LogLevel.INFO, "compile", message, context)

    def failed(self, error: Exception) -> None:
        """Log a failed compile.

        Args:
            error: Exception that caused failure
        """
        context = self._context("compile_failed")
        context["error"] = str(error)
        context["error_type"] = type(error).__name__

        message = f"Compile of '{self.template_name or self.key}' failed: {error}"
        self.parent._log(LogLevel.ERROR, "compile", message, context)


class RenderLogger:
    """Logger for one render chain."""

    def __init__(self, parent: SabreLogger, template_name: str | None):
        self.parent = parent
        self.template_name = template_name or "<anonymous>"

    def started(self) -> None:
        self.parent._log(
            LogLevel.DEBUG,
            "render",
            f"Rendering '{self.template_name}'",
            {"template_name": self.template_name, "event": "render_started"},
        )

    def completed(self, duration_ms: int, length: int) -> None:
        """Log render completion.

        Args:
            duration_ms: Render duration in milliseconds
            length: Length of the composed output
        """
        context = {
            "template_name": self.template_name,
            "event": "render_completed",
            "duration_ms": duration_ms,
            "length": length,
        }
        duration_s = duration_ms / 1000
        message = f"Rendered '{self.template_name}' ({length} chars, {duration_s:.2f}s) ✓"
        self.parent._log(LogLevel.INFO, "render", message, context)

    def failed(self, error: Exception) -> None:
        context = {
            "template_name": self.template_name,
            "event": "render_failed",
            "error": str(error),
            "error_type": type(error).__name__,
        }
        message = f"Render of '{self.template_name}' failed: {error}"
        self.parent._log(LogLevel.ERROR, "render", message, context)
