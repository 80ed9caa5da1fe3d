"""Sabre engine - compile cache, instance factory and render entry points."""

from .engine import Sabre, TemplateResolver, model_kind_for

__all__ = [
    "Sabre",
    "TemplateResolver",
    "model_kind_for",
]
