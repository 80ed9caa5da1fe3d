"""Error registry for creating errors from templates."""

from typing import Any

from .errors import ERROR_CLASSES, CompilationError, ErrorCategory, ErrorTemplate, SabreError


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Add or replace an error template.

        Args:
            template: Template to register under its code
        """
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: SabreError | None = None,
    ) -> SabreError:
        """Create error instance from template + context.

        The concrete class is chosen from the template category, so
        USAGE codes produce UsageError, COMPILATION codes CompilationError
        and so on.

        Args:
            code: Error code
            context: Context variables for template interpolation. The keys
                ``template_name``, ``diagnostics`` and ``generated_source``
                are also copied onto the error.
            cause: Optional cause error

        Returns:
            SabreError instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        # An explicit detail from the caller wins over the template text
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        error_class = ERROR_CLASSES[template.category]
        kwargs: dict[str, Any] = {
            "code": template.code,
            "category": template.category,
            "message": message,
            "detail": detail,
            "suggestion": suggestion,
            "template_name": context.get("template_name"),
            "diagnostics": list(context.get("diagnostics") or []),
            "cause": cause,
        }
        if issubclass(error_class, CompilationError):
            kwargs["generated_source"] = context.get("generated_source")

        return error_class(**kwargs)

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except KeyError:
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # GENERATION Errors
        self._templates["TEMPLATE_GENERATION_FAILED"] = ErrorTemplate(
            code="TEMPLATE_GENERATION_FAILED",
            category=ErrorCategory.GENERATION,
            message_template="Error when generating template code:",
            detail_template="The generator rejected template '{file_name}'",
            suggestion_template="Fix the template syntax at the reported locations",
        )

        # COMPILATION Errors
        self._templates["TEMPLATE_COMPILATION_FAILED"] = ErrorTemplate(
            code="TEMPLATE_COMPILATION_FAILED",
            category=ErrorCategory.COMPILATION,
            message_template="Error when compiling template:",
            detail_template="The generated source for '{file_name}' did not compile",
            suggestion_template="Inspect generated_source at the reported lines",
        )

        # USAGE Errors
        self._templates["SECTION_MISSING"] = ErrorTemplate(
            code="SECTION_MISSING",
            category=ErrorCategory.USAGE,
            message_template="No section has been defined with name '{name}'",
            detail_template="A layout required a section the rendered template never defined",
            suggestion_template="Define the section or render it with required=False",
        )

        self._templates["SECTION_ALREADY_DEFINED"] = ErrorTemplate(
            code="SECTION_ALREADY_DEFINED",
            category=ErrorCategory.USAGE,
            message_template="A section is already registered with name '{name}'",
            detail_template="Section names must be unique within one render",
            suggestion_template="Rename one of the sections",
        )

        self._templates["SECTION_NAME_INVALID"] = ErrorTemplate(
            code="SECTION_NAME_INVALID",
            category=ErrorCategory.USAGE,
            message_template="Section name cannot be empty",
        )

        self._templates["LAYOUT_NOT_FOUND"] = ErrorTemplate(
            code="LAYOUT_NOT_FOUND",
            category=ErrorCategory.USAGE,
            message_template="Layout [{layout}] was not found in registered templates",
            detail_template="Template '{template_name}' declares layout '{layout}'",
            suggestion_template="Compile the layout under that name or configure a template resolver",
        )

        self._templates["TEMPLATE_NOT_FOUND"] = ErrorTemplate(
            code="TEMPLATE_NOT_FOUND",
            category=ErrorCategory.USAGE,
            message_template="No template could be resolved with name '{name}'",
            suggestion_template="Compile the template under that name first",
        )

        self._templates["BODY_STACK_EMPTY"] = ErrorTemplate(
            code="BODY_STACK_EMPTY",
            category=ErrorCategory.USAGE,
            message_template="render_body() called with no pending body",
            detail_template="Only a layout reached through a child template has a body to render",
        )

        self._templates["TEMPLATE_CONTENT_EMPTY"] = ErrorTemplate(
            code="TEMPLATE_CONTENT_EMPTY",
            category=ErrorCategory.USAGE,
            message_template="Template content cannot be empty",
        )

        self._templates["FILE_EXTENSION_EMPTY"] = ErrorTemplate(
            code="FILE_EXTENSION_EMPTY",
            category=ErrorCategory.USAGE,
            message_template="File extension cannot be empty for '{file_name}'",
            suggestion_template="Pass a file name with an extension or set default_file_extension",
        )

        self._templates["PROVIDER_NOT_FOUND"] = ErrorTemplate(
            code="PROVIDER_NOT_FOUND",
            category=ErrorCategory.USAGE,
            message_template="Unable to find a registered language provider for extension [{extension}]",
            suggestion_template="Register a LanguageProvider that handles this extension",
        )

        self._templates["MODEL_TYPE_CONFLICT"] = ErrorTemplate(
            code="MODEL_TYPE_CONFLICT",
            category=ErrorCategory.USAGE,
            message_template=(
                "Cannot use model type [{model_type}] when the template base "
                "[{template_base}] already sets the model type"
            ),
        )

        self._templates["MODEL_TYPE_MISMATCH"] = ErrorTemplate(
            code="MODEL_TYPE_MISMATCH",
            category=ErrorCategory.USAGE,
            message_template="Model of type [{actual}] is not a [{expected}]",
            detail_template="Template '{template_name}' was compiled for model type [{expected}]",
        )

        self._templates["INSTANCE_BUSY"] = ErrorTemplate(
            code="INSTANCE_BUSY",
            category=ErrorCategory.USAGE,
            message_template="Template '{template_name}' is already rendering",
            suggestion_template="Create a new instance per render",
        )

        self._templates["TEMPLATE_NOT_RENDERING"] = ErrorTemplate(
            code="TEMPLATE_NOT_RENDERING",
            category=ErrorCategory.USAGE,
            message_template="'{operation}' is only available while the template is rendering",
            suggestion_template="Call it from execute() or from a section producer",
        )

        # SYSTEM Errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.SYSTEM,
            message_template="Invalid configuration",
            detail_template="The Sabre configuration is invalid",
            suggestion_template="Check the configuration file and fix errors",
        )

        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal Sabre error",
            detail_template="An unexpected error occurred in the Sabre engine",
            suggestion_template="Check the logs and report this issue",
        )
