"""Sabre error types."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    GENERATION = "GENERATION"
    COMPILATION = "COMPILATION"
    USAGE = "USAGE"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class Diagnostic:
    """A single location-tagged message from the generator or compiler."""

    file_name: str
    line: int
    column: int
    code: str
    message: str

    def format(self) -> str:
        """Render as ``file(line,col): error CODE: message``."""
        return f"{self.file_name}({self.line},{self.column}): error {self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "line": self.line,
            "column": self.column,
            "code": self.code,
            "message": self.message,
        }


def format_diagnostics(header: str, diagnostics: list[Diagnostic]) -> str:
    """Render a header followed by one line per diagnostic.

    Args:
        header: First line of the report
        diagnostics: Diagnostics to render, in order

    Returns:
        Multi-line report suitable for a build log
    """
    lines = [header]
    lines.extend(diagnostic.format() for diagnostic in diagnostics)
    return "\n".join(lines)


@dataclass
class SabreError(Exception):
    """Structured error with context. Base exception for all Sabre errors."""

    # Identity
    code: str  # e.g., "SECTION_MISSING"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Context
    template_name: str | None = None  # Logical template name, when known
    diagnostics: list[Diagnostic] = field(default_factory=list)

    cause: "SabreError | None" = None

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.report())

    def report(self) -> str:
        """Human-readable form including every diagnostic."""
        if not self.diagnostics:
            return self.message
        return format_diagnostics(self.message, self.diagnostics)

    def __str__(self) -> str:
        return self.report()

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "template_name": self.template_name,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }


@dataclass
class GenerationError(SabreError):
    """The template generator rejected the template text."""


@dataclass
class CompilationError(SabreError):
    """The generated source failed to compile or load."""

    generated_source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["generated_source"] = self.generated_source
        return data


@dataclass
class UsageError(SabreError):
    """The caller or a template body misused the engine."""


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Section '{name}' is not defined"
    detail_template: str | None = None
    suggestion_template: str | None = None


ERROR_CLASSES: dict[ErrorCategory, type[SabreError]] = {
    ErrorCategory.GENERATION: GenerationError,
    ErrorCategory.COMPILATION: CompilationError,
    ErrorCategory.USAGE: UsageError,
    ErrorCategory.SYSTEM: SabreError,
}
