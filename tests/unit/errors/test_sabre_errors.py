"""Tests for structured errors."""

import pytest

from sabre_core.errors import (
    CompilationError,
    Diagnostic,
    ErrorCategory,
    ErrorFactory,
    ErrorRegistry,
    ErrorTemplate,
    GenerationError,
    SabreError,
    UsageError,
    create_error,
    format_diagnostics,
)


@pytest.fixture
def registry() -> ErrorRegistry:
    return ErrorRegistry()


class TestDiagnostic:
    def test_format(self):
        diagnostic = Diagnostic("page.pyt", 3, 7, "SyntaxError", "invalid syntax")
        assert diagnostic.format() == "page.pyt(3,7): error SyntaxError: invalid syntax"

    def test_format_diagnostics(self):
        report = format_diagnostics(
            "Header:",
            [Diagnostic("a", 1, 2, "E1", "one"), Diagnostic("b", 3, 4, "E2", "two")],
        )
        assert report == "Header:\na(1,2): error E1: one\nb(3,4): error E2: two"

    def test_to_dict(self):
        assert Diagnostic("a", 1, 2, "E", "m").to_dict() == {
            "file_name": "a",
            "line": 1,
            "column": 2,
            "code": "E",
            "message": "m",
        }


class TestRegistry:
    @pytest.mark.parametrize(
        ("code", "error_class"),
        [
            ("TEMPLATE_GENERATION_FAILED", GenerationError),
            ("TEMPLATE_COMPILATION_FAILED", CompilationError),
            ("SECTION_MISSING", UsageError),
            ("LAYOUT_NOT_FOUND", UsageError),
            ("BODY_STACK_EMPTY", UsageError),
            ("INTERNAL_ERROR", SabreError),
        ],
    )
    def test_category_selects_class(self, registry: ErrorRegistry, code, error_class):
        error = registry.create(code, {"name": "x", "layout": "y", "file_name": "f"})
        assert type(error) is error_class

    def test_message_interpolation(self, registry: ErrorRegistry):
        error = registry.create("SECTION_MISSING", {"name": "Head"})
        assert error.message == "No section has been defined with name 'Head'"
        assert error.category == ErrorCategory.USAGE

    def test_missing_context_keeps_template(self, registry: ErrorRegistry):
        error = registry.create("SECTION_MISSING")
        assert error.message == "No section has been defined with name '{name}'"

    def test_unknown_code(self, registry: ErrorRegistry):
        with pytest.raises(ValueError, match="Unknown error code"):
            registry.create("NOPE")

    def test_detail_override(self, registry: ErrorRegistry):
        error = registry.create("CONFIG_INVALID", {"detail": "port must be an integer"})
        assert error.detail == "port must be an integer"

    def test_register_custom_template(self, registry: ErrorRegistry):
        registry.register(
            ErrorTemplate(code="CUSTOM", category=ErrorCategory.USAGE, message_template="{what}")
        )
        assert "CUSTOM" in registry.list_codes()
        assert registry.create("CUSTOM", {"what": "custom"}).message == "custom"

    def test_compilation_error_fields(self, registry: ErrorRegistry):
        diagnostics = [Diagnostic("p", 1, 1, "SyntaxError", "bad")]
        error = registry.create(
            "TEMPLATE_COMPILATION_FAILED",
            {"diagnostics": diagnostics, "generated_source": "src", "template_name": "p"},
        )

        assert isinstance(error, CompilationError)
        assert error.generated_source == "src"
        assert error.diagnostics == diagnostics
        assert error.template_name == "p"


class TestSabreError:
    def test_is_exception(self):
        with pytest.raises(SabreError):
            raise create_error("INTERNAL_ERROR")

    def test_str_includes_diagnostics(self):
        error = create_error(
            "TEMPLATE_GENERATION_FAILED",
            diagnostics=[Diagnostic("p.pyt", 2, 5, "InvalidCharacter", "null")],
        )
        assert str(error) == (
            "Error when generating template code:\np.pyt(2,5): error InvalidCharacter: null"
        )

    def test_to_dict(self):
        cause = create_error("INTERNAL_ERROR")
        error = ErrorFactory().create(
            "TEMPLATE_COMPILATION_FAILED",
            cause=cause,
            generated_source="x",
            diagnostics=[Diagnostic("p", 1, 1, "E", "m")],
        )
        data = error.to_dict()

        assert data["code"] == "TEMPLATE_COMPILATION_FAILED"
        assert data["category"] == "COMPILATION"
        assert data["generated_source"] == "x"
        assert data["diagnostics"][0]["code"] == "E"
        assert data["cause"]["code"] == "INTERNAL_ERROR"
        assert "timestamp" in data
