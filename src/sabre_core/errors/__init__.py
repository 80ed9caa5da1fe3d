"""Sabre error handling - Structured errors with diagnostics."""

from .errors import (
    CompilationError,
    Diagnostic,
    ErrorCategory,
    ErrorTemplate,
    GenerationError,
    SabreError,
    UsageError,
    format_diagnostics,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "SabreError",
    "GenerationError",
    "CompilationError",
    "UsageError",
    "ErrorCategory",
    "ErrorTemplate",
    "Diagnostic",
    "format_diagnostics",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
