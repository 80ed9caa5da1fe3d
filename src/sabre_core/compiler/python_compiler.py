"""Python source compiler - loads generated template modules.

Generated source is compiled with the builtin ``compile()`` and executed
into a fresh module object. Nothing is written to disk and the module is
not registered in ``sys.modules``; the template class keeps its module
namespace alive.
"""

import importlib
import itertools
import linecache
import re
import traceback
import types
from collections.abc import Sequence

from sabre_core.errors import Diagnostic

from .types import CompilationResult

_module_ids = itertools.count(1)


def source_filename(name: str, module_id: int) -> str:
    """Pseudo filename used for generated code in tracebacks."""
    return f"<sabre:{name}#{module_id}>"


def forget_source(filename: str | None) -> None:
    """Drop generated source registered in linecache for debug tracebacks."""
    if filename and filename.startswith("<sabre:"):
        linecache.cache.pop(filename, None)


class PythonSourceCompiler:
    """Compile generated source into a template class.

    Example:
        >>> compiler = PythonSourceCompiler()
        >>> result = compiler.compile(source, [], debug_info=False, name="page.pyt")
        >>> result.template_class().run()
    """

    def __init__(self, base_class: type | None = None):
        """Initialize compiler.

        Args:
            base_class: Class the generated template must derive from
                (default: sabre_core.template.Template)
        """
        if base_class is None:
            from sabre_core.template import Template

            base_class = Template
        self.base_class = base_class

    def compile(
        self,
        generated_source: str,
        module_references: Sequence[str],
        debug_info: bool,
        name: str,
    ) -> CompilationResult:
        """Compile and execute generated module source.

        Args:
            generated_source: Python module source
            module_references: Modules imported into the module namespace
                before execution, bound like an ``import`` statement would
            debug_info: Register the source with linecache for tracebacks;
                the entry is dropped again if loading fails
            name: Name used in diagnostics and the pseudo filename
                (``<sabre:NAME#ID>``)

        Returns:
            CompilationResult with the template class or diagnostics
        """
        module_id = next(_module_ids)
        filename = source_filename(name, module_id)

        try:
            code = compile(generated_source, filename, "exec")
        except SyntaxError as e:
            return CompilationResult(
                success=False,
                diagnostics=[
                    Diagnostic(
                        file_name=name,
                        line=e.lineno or 0,
                        column=e.offset or 0,
                        code=type(e).__name__,
                        message=e.msg,
                    )
                ],
            )

        module = types.ModuleType(self._module_name(name, module_id))
        module.__file__ = filename

        diagnostics: list[Diagnostic] = []
        for reference in module_references:
            try:
                importlib.import_module(reference)
                top = reference.split(".")[0]
                module.__dict__[top] = importlib.import_module(top)
            except ImportError as e:
                diagnostics.append(
                    Diagnostic(name, 0, 0, type(e).__name__, f"Cannot import '{reference}': {e}")
                )
        if diagnostics:
            return CompilationResult(success=False, diagnostics=diagnostics)

        if debug_info:
            linecache.cache[filename] = (
                len(generated_source),
                None,
                generated_source.splitlines(keepends=True),
                filename,
            )

        try:
            exec(code, module.__dict__)
        except Exception as e:
            line, column = self._error_location(e, filename)
            forget_source(filename)
            return CompilationResult(
                success=False,
                diagnostics=[Diagnostic(name, line, column, type(e).__name__, str(e))],
            )

        candidates = [
            value
            for value in vars(module).values()
            if isinstance(value, type)
            and issubclass(value, self.base_class)
            and value.__module__ == module.__name__
        ]
        if len(candidates) != 1:
            message = (
                f"Generated source must define exactly one {self.base_class.__name__} "
                f"subclass, found {len(candidates)}"
            )
            forget_source(filename)
            return CompilationResult(
                success=False,
                diagnostics=[Diagnostic(name, 0, 0, "TemplateClassNotFound", message)],
            )

        return CompilationResult(
            success=True,
            template_class=candidates[0],
            source_filename=filename if debug_info else None,
        )

    def _module_name(self, name: str, module_id: int) -> str:
        safe = re.sub(r"\W", "_", name) or "template"
        return f"sabre_templates.{safe}_{module_id}"

    def _error_location(self, error: BaseException, filename: str) -> tuple[int, int]:
        """Innermost (line, column) of the traceback inside generated code."""
        line, column = 0, 0
        for frame in traceback.extract_tb(error.__traceback__):
            if frame.filename == filename:
                line = frame.lineno or 0
                column = (frame.colno or 0) + 1
        return line, column
