"""Compiler pipeline for Sabre templates."""

from .codeblock import CodeBlockGenerator
from .providers import DEFAULT_EXTENSION, LanguageProvider, default_providers, normalize_extension
from .python_compiler import PythonSourceCompiler, forget_source, source_filename
from .types import (
    CompilationResult,
    CompiledArtifact,
    GenerationResult,
    TemplateCompiler,
    TemplateGenerator,
)

__all__ = [
    "CodeBlockGenerator",
    "PythonSourceCompiler",
    "LanguageProvider",
    "DEFAULT_EXTENSION",
    "default_providers",
    "normalize_extension",
    "source_filename",
    "forget_source",
    "GenerationResult",
    "CompilationResult",
    "CompiledArtifact",
    "TemplateGenerator",
    "TemplateCompiler",
]
