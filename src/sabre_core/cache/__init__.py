"""Compiled template cache."""

from .artifact_cache import ArtifactCache, CacheStats
from .fingerprint import compute_fingerprint, type_name

__all__ = [
    "ArtifactCache",
    "CacheStats",
    "compute_fingerprint",
    "type_name",
]
