"""Code block generator - template text is the body of ``execute()``.

No template syntax is parsed. The text is dedented and placed inside a
generated template class, with a few locals bound for convenience:

    write_literal("<p>Hello ")
    write(model["name"])
    write_literal("</p>")
"""

import re
import textwrap
from collections.abc import Sequence

from sabre_core.errors import Diagnostic

from .types import GenerationResult

CLASS_NAME = "GeneratedTemplate"
BODY_INDENT = " " * 8

_DOTTED_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


class CodeBlockGenerator:
    """Wrap Python code blocks into a template module."""

    def __init__(self, base_class: type | None = None):
        """Initialize generator.

        Args:
            base_class: Class generated templates derive from. It must be
                importable by module and qualified name.
        """
        if base_class is None:
            from sabre_core.template import Template

            base_class = Template
        self.base_class = base_class

    def generate(
        self,
        content: str,
        file_name: str,
        model_type_name: str,
        namespace_imports: Sequence[str],
    ) -> GenerationResult:
        """Generate module source for one template.

        Args:
            content: Python statements forming the template body
            file_name: Template file name, used in diagnostics
            model_type_name: Fully qualified model type name
            namespace_imports: Modules star-imported into the template module

        Returns:
            GenerationResult with the module source or diagnostics
        """
        diagnostics = self._check_content(content, file_name)
        for namespace in namespace_imports:
            if not _DOTTED_NAME.match(namespace):
                diagnostics.append(
                    Diagnostic(file_name, 0, 0, "InvalidNamespace", f"Invalid namespace '{namespace}'")
                )

        base_module = self.base_class.__module__
        base_name = self.base_class.__qualname__
        if "<" in base_name:
            diagnostics.append(
                Diagnostic(
                    file_name,
                    0,
                    0,
                    "BaseNotImportable",
                    f"Template base '{base_name}' must be defined at module level",
                )
            )

        if diagnostics:
            return GenerationResult(success=False, diagnostics=diagnostics)

        lines = [f"from {base_module} import {base_name.split('.')[0]} as _SabreBase"]
        lines.extend(f"from {namespace} import *" for namespace in namespace_imports)
        base_ref = ".".join(["_SabreBase", *base_name.split(".")[1:]])
        lines += [
            "",
            "",
            f"class {CLASS_NAME}({base_ref}):",
            f"    MODEL_TYPE_NAME = {model_type_name!r}",
            "",
            "    def execute(self):",
            "        model = self.model",
            "        view_bag = self.view_bag",
            "        write = self.write",
            "        write_literal = self.write_literal",
        ]

        body = textwrap.dedent(content).strip("\n")
        if body.strip():
            lines.append(textwrap.indent(body, BODY_INDENT, lambda line: True))
        else:
            lines.append(BODY_INDENT + "pass")

        return GenerationResult(success=True, generated_source="\n".join(lines) + "\n")

    def _check_content(self, content: str, file_name: str) -> list[Diagnostic]:
        diagnostics = []
        for number, line in enumerate(content.splitlines(), start=1):
            column = line.find("\0")
            if column >= 0:
                diagnostics.append(
                    Diagnostic(
                        file_name,
                        number,
                        column + 1,
                        "InvalidCharacter",
                        "Template text contains a null character",
                    )
                )
        return diagnostics
