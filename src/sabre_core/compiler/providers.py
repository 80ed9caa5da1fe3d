"""Language providers - pick a generator and compiler by file extension."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .codeblock import CodeBlockGenerator
from .python_compiler import PythonSourceCompiler
from .types import TemplateCompiler, TemplateGenerator

DEFAULT_EXTENSION = ".pyt"


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and make sure it starts with a dot.

    Returns an empty string for blank input.
    """
    extension = extension.strip().lower()
    if not extension:
        return ""
    if not extension.startswith("."):
        extension = "." + extension
    return extension


@dataclass
class LanguageProvider:
    """Generator and compiler pair for a set of file extensions."""

    extensions: list[str]
    generator: TemplateGenerator
    compiler: TemplateCompiler = field(default_factory=PythonSourceCompiler)

    def __post_init__(self) -> None:
        self.extensions = [normalize_extension(ext) for ext in self.extensions if ext.strip()]
        if not self.extensions:
            raise ValueError("LanguageProvider needs at least one file extension")

    def handles(self, extension: str) -> bool:
        return normalize_extension(extension) in self.extensions


def default_providers(
    base_class: type | None = None,
    extensions: Iterable[str] = (DEFAULT_EXTENSION,),
) -> list[LanguageProvider]:
    """Providers used when an engine is created without any.

    Args:
        base_class: Template base class for generated code
        extensions: Extensions handled by the code block generator
    """
    return [
        LanguageProvider(
            extensions=list(extensions),
            generator=CodeBlockGenerator(base_class),
            compiler=PythonSourceCompiler(base_class),
        )
    ]
