"""Shared types for Sabre.

Import from here rather than submodules:
    from sabre_core.types import LogLevel, ModelKind, ValidationResult
"""

from .enums import FailurePolicy, LogFormat, LogLevel, ModelKind, RenderState
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "FailurePolicy",
    "ModelKind",
    "RenderState",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
