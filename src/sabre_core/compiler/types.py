"""Compiler pipeline types."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from sabre_core.errors import Diagnostic
from sabre_core.types import ModelKind


@dataclass
class GenerationResult:
    """Output of a template generator.

    Attributes:
        success: Whether the template text could be turned into source
        generated_source: Python module source (may be partial on failure)
        diagnostics: Problems found in the template text
    """

    success: bool
    generated_source: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class CompilationResult:
    """Output of a template compiler.

    Attributes:
        success: Whether a template class was produced
        template_class: The loaded Template subclass
        diagnostics: Problems found in the generated source
        source_filename: linecache filename of the loaded source, when
            registered for debugging
    """

    success: bool
    template_class: type | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    source_filename: str | None = None


@dataclass(frozen=True)
class CompiledArtifact:
    """A loaded template class and what it was compiled from."""

    key: str
    name: str | None
    template_class: type
    fingerprint: str
    model_type: Any
    model_kind: ModelKind
    file_name: str
    generated_source: str | None = None
    source_filename: str | None = None


@runtime_checkable
class TemplateGenerator(Protocol):
    """Turns template text into Python module source."""

    def generate(
        self,
        content: str,
        file_name: str,
        model_type_name: str,
        namespace_imports: Sequence[str],
    ) -> GenerationResult:
        """Generate module source defining one template class."""
        ...


@runtime_checkable
class TemplateCompiler(Protocol):
    """Turns generated module source into a loaded template class."""

    def compile(
        self,
        generated_source: str,
        module_references: Sequence[str],
        debug_info: bool,
        name: str,
    ) -> CompilationResult:
        """Compile and load generated source."""
        ...
