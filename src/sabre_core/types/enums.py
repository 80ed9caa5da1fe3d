"""Shared enumerations for Sabre."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class FailurePolicy(str, Enum):
    """What the artifact cache does with a failed compile."""

    RETRY = "retry"  # Nothing cached, next call compiles again
    CACHE = "cache"  # Failure remembered until invalidated


class ModelKind(str, Enum):
    """How a template instance exposes its model."""

    TYPED = "typed"
    DYNAMIC = "dynamic"


class RenderState(str, Enum):
    """Lifecycle of a template instance during a render chain."""

    IDLE = "idle"
    EXECUTING = "executing"
    LAYOUT_CHAINING = "layout_chaining"
