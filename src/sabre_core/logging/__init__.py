"""Sabre Logging - Colored or JSON logging for compile and render events."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    CompileLogger,
    LogConfig,
    RenderLogger,
    SabreLogger,
)

__all__ = [
    # Logger classes
    "SabreLogger",
    "CompileLogger",
    "RenderLogger",
    "LogConfig",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
