"""Tests for the Template base class, using hand-written subclasses."""

import pytest

from sabre_core.errors import UsageError
from sabre_core.template import (
    AttributeSegment,
    DynamicModel,
    ExecutionContext,
    Fragment,
    Template,
)
from sabre_core.types import ModelKind, RenderState


class StubEngine:
    """Resolves templates from a dict of classes."""

    def __init__(self, **templates):
        self.templates = templates

    def find_template(self, name):
        template_class = self.templates.get(name)
        if template_class is None:
            return None
        instance = template_class()
        instance.engine = self
        instance.name = name
        return instance


def make(template_class, engine=None, model=None):
    instance = template_class()
    instance.engine = engine
    instance.model = model
    return instance


class Greeting(Template):
    def execute(self):
        self.write_literal("<p>Hello ")
        self.write(self.model)
        self.write_literal("</p>")


class Child(Template):
    def execute(self):
        self.layout = "Outer"
        self.define_section("Title", lambda: self.write("A & B"))
        self.write_literal("<main>child</main>")


class Outer(Template):
    def execute(self):
        self.write_literal("<title>")
        self.write(self.render_section("Title"))
        self.write_literal("</title>")
        self.write(self.render_body())


class ChildOfMiddle(Template):
    def execute(self):
        self.layout = "Middle"
        self.define_section("Title", "T")
        self.write_literal("c")


class Middle(Template):
    def execute(self):
        self.layout = "Outer"
        self.write_literal("[")
        self.write(self.render_body())
        self.write_literal("]")


class NeedsMissing(Template):
    def execute(self):
        self.write_literal("before")
        self.write(self.render_section("Missing"))


class ChildWithMissingLayout(Template):
    def execute(self):
        self.layout = "Missing"
        self.write_literal("x")


class Reentrant(Template):
    def execute(self):
        self.run()


class TestRun:
    def test_writes_encoded_model(self):
        assert make(Greeting, model="<Ada>").run() == "<p>Hello &lt;Ada&gt;</p>"

    def test_state_is_idle_after_run(self):
        instance = make(Greeting, model="x")
        instance.run()
        assert instance.state == RenderState.IDLE

    def test_reentrant_run_raises_busy(self):
        instance = make(Reentrant)
        with pytest.raises(UsageError) as exc_info:
            instance.run()
        assert exc_info.value.code == "INSTANCE_BUSY"
        assert instance.state == RenderState.IDLE

    def test_write_outside_run_raises(self):
        with pytest.raises(UsageError) as exc_info:
            make(Greeting).write("x")
        assert exc_info.value.code == "TEMPLATE_NOT_RENDERING"

    def test_view_bag_from_argument(self):
        class ShowBag(Template):
            def execute(self):
                self.write(self.view_bag["title"])

        assert make(ShowBag).run(view_bag={"title": "Home"}) == "Home"


class TestLayouts:
    def test_layout_receives_sections_and_body(self):
        engine = StubEngine(Outer=Outer)
        output = make(Child, engine).run()
        assert output == "<title>A &amp; B</title><main>child</main>"

    def test_chain_through_two_layouts(self):
        engine = StubEngine(Outer=Outer, Middle=Middle)
        assert make(ChildOfMiddle, engine).run() == "<title>T</title>[c]"

    def test_context_is_shared_with_layout(self):
        engine = StubEngine(Outer=Outer)
        context = ExecutionContext()
        make(Child, engine).run(context)

        assert context.section_names == ["Title"]
        assert context.pending_bodies == 0

    def test_missing_layout_raises(self):
        with pytest.raises(UsageError) as exc_info:
            make(ChildWithMissingLayout, StubEngine()).run()
        assert exc_info.value.code == "LAYOUT_NOT_FOUND"
        assert "Missing" in exc_info.value.message

    def test_layout_without_engine_raises(self):
        with pytest.raises(UsageError):
            make(ChildWithMissingLayout).run()

    def test_missing_required_section_raises(self):
        with pytest.raises(UsageError) as exc_info:
            make(NeedsMissing).run()
        assert exc_info.value.code == "SECTION_MISSING"
        assert str(exc_info.value) == "No section has been defined with name 'Missing'"

    def test_render_body_without_child_raises(self):
        with pytest.raises(UsageError) as exc_info:
            make(Outer).run(ExecutionContext())
        # Outer asks for its section first
        assert exc_info.value.code == "SECTION_MISSING"

        class BodyOnly(Template):
            def execute(self):
                self.write(self.render_body())

        with pytest.raises(UsageError) as exc_info:
            make(BodyOnly).run()
        assert exc_info.value.code == "BODY_STACK_EMPTY"


class TestSections:
    def test_optional_missing_section_is_empty(self):
        class Optional(Template):
            def execute(self):
                self.write_literal("[")
                self.write(self.render_section("Side", required=False))
                self.write_literal("]")

        assert make(Optional).run() == "[]"

    def test_section_producer_is_captured_eagerly(self):
        """Test that a producer's writes go to the section, not the body."""

        class Defines(Template):
            def execute(self):
                self.write_literal("body")
                self.define_section("S", lambda: self.write_literal("section"))
                self.write(Fragment(str(self.is_section_defined("S"))))
                self.write(self.render_section("S"))

        assert make(Defines).run() == "bodyTruesection"

    def test_string_section_is_markup(self):
        class Defines(Template):
            def execute(self):
                self.define_section("S", "<b>")
                self.write(self.render_section("S"))

        assert make(Defines).run() == "<b>"

    def test_capture(self):
        class Captures(Template):
            def execute(self):
                fragment = self.capture(lambda: self.write("<x>"))
                self.write_literal(len(fragment.text))

        assert make(Captures).run() == "9"


class TestAttributes:
    def test_write_attribute(self):
        class WithAttribute(Template):
            def execute(self):
                self.write_literal("<input")
                self.write_attribute(
                    "disabled",
                    (' disabled="', 6),
                    ('"', 20),
                    AttributeSegment.dynamic("", self.model),
                )
                self.write_literal(">")

        assert make(WithAttribute, model=True).run() == '<input disabled="disabled">'
        assert make(WithAttribute, model=False).run() == "<input>"


class TestModelBinding:
    def test_typed_model_checked(self):
        instance = Greeting()
        instance.model_type = int
        instance.model = 3

        with pytest.raises(UsageError) as exc_info:
            instance.model = "three"
        assert exc_info.value.code == "MODEL_TYPE_MISMATCH"
        assert instance.model == 3

    def test_typed_model_allows_none(self):
        instance = Greeting()
        instance.model_type = int
        instance.model = None
        assert instance.model is None

    def test_dynamic_model_wraps_mapping(self):
        instance = Greeting()
        instance.model_kind = ModelKind.DYNAMIC
        instance.model = {"name": "Ada"}

        assert isinstance(instance.model, DynamicModel)
        assert instance.model["name"] == "Ada"

    def test_dynamic_model_rejects_objects(self):
        instance = Greeting()
        instance.model_kind = ModelKind.DYNAMIC
        with pytest.raises(UsageError):
            instance.model = 3

    def test_raw(self):
        assert Template.raw("<b>") == "<b>"
