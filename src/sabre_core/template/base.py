"""Template base class - the runtime every compiled template derives from.

A compiled template overrides ``execute()`` and calls back into the
methods below to produce output. ``run()`` drives the render chain:

1. Execute this template into a fresh sink.
2. If ``layout`` is set, capture the output as a body fragment, push it on
   the shared context and run the layout with the same context.
3. The first template without a layout produces the final string.

Because a child finishes completely before its layout starts, every
section the child defines is registered before the layout asks for it.
"""

import io
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, TextIO

from markupsafe import Markup

from sabre_core.errors import create_error
from sabre_core.types import ModelKind, RenderState

from .attributes import write_attribute_to
from .context import ExecutionContext
from .types import (
    EMPTY_FRAGMENT,
    AttributeSegment,
    DynamicModel,
    Fragment,
    ModelBinding,
    PositionTagged,
    TypedModel,
    ViewBag,
)
from .writer import raw as _raw
from .writer import write_literal_to as _write_literal_to
from .writer import write_to as _write_to

if TYPE_CHECKING:
    from sabre_core.engine import Sabre

SectionProducer = Fragment | Markup | str | Callable[[], Any]


class Template:
    """Base class for compiled templates.

    Subclasses may pin the model type by setting ``MODEL_TYPE``; an engine
    using such a base refuses to compile for any other model type.
    """

    MODEL_TYPE: ClassVar[type | None] = None

    def __init__(self) -> None:
        self.layout: str | None = None

        # Bound by the engine when the instance is created
        self.engine: "Sabre | None" = None
        self.name: str | None = None
        self.source: str | None = None  # Generated source, debug mode only
        self.model_kind: ModelKind = ModelKind.TYPED
        self.model_type: Any = object

        self._model: ModelBinding = TypedModel(None)
        self._context: ExecutionContext | None = None
        self._sink: TextIO | None = None
        self._state = RenderState.IDLE

    # ─────────────────────────────────────────────────────────────────
    # Model and context
    # ─────────────────────────────────────────────────────────────────

    @property
    def model(self) -> Any:
        """The bound model: the object itself, or a DynamicModel mapping."""
        if isinstance(self._model, TypedModel):
            return self._model.value
        return self._model

    @model.setter
    def model(self, value: Any) -> None:
        self._model = self.bind_model(value)

    def bind_model(self, value: Any) -> ModelBinding:
        """Wrap a model value according to this instance's model kind.

        Raises:
            UsageError(MODEL_TYPE_MISMATCH) if the value does not fit
        """
        if self.model_kind == ModelKind.DYNAMIC:
            if value is None or isinstance(value, Mapping):
                return DynamicModel(value)
            raise create_error(
                "MODEL_TYPE_MISMATCH",
                actual=type(value).__name__,
                expected="Mapping",
                template_name=self.name,
            )

        if (
            value is not None
            and isinstance(self.model_type, type)
            and not isinstance(value, self.model_type)
        ):
            raise create_error(
                "MODEL_TYPE_MISMATCH",
                actual=type(value).__name__,
                expected=self.model_type.__name__,
                template_name=self.name,
            )
        return TypedModel(value)

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def context(self) -> ExecutionContext:
        if self._context is None:
            raise create_error("TEMPLATE_NOT_RENDERING", operation="context")
        return self._context

    @property
    def view_bag(self) -> ViewBag:
        return self.context.view_bag

    @property
    def sink(self) -> TextIO:
        if self._sink is None:
            raise create_error("TEMPLATE_NOT_RENDERING", operation="write")
        return self._sink

    # ─────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────

    def execute(self) -> None:
        """Template body. Overridden by generated code."""

    def run(
        self,
        context: ExecutionContext | None = None,
        view_bag: ViewBag | Mapping[str, Any] | None = None,
    ) -> str:
        """Render this template and every layout it chains into.

        Args:
            context: Context to render with; a new one is created if omitted
            view_bag: Initial view data for a new context

        Returns:
            Fully composed output of the chain

        Raises:
            UsageError(INSTANCE_BUSY) if this instance is already rendering
            UsageError(LAYOUT_NOT_FOUND) if the layout cannot be resolved
        """
        if self._state != RenderState.IDLE:
            raise create_error("INSTANCE_BUSY", template_name=self.name)

        if context is None:
            context = ExecutionContext(view_bag)

        sink = io.StringIO()
        self._state = RenderState.EXECUTING
        self._context = context
        self._sink = sink
        try:
            self.execute()
        finally:
            self._sink = None
            self._context = None
            self._state = RenderState.IDLE

        if self.layout is None:
            return sink.getvalue()

        self._state = RenderState.LAYOUT_CHAINING
        try:
            layout = self.find_template(self.layout)
            if layout is None:
                raise create_error(
                    "LAYOUT_NOT_FOUND",
                    layout=self.layout,
                    template_name=self.name,
                )

            context.push_body(Fragment(sink.getvalue()))
            return layout.run(context)
        finally:
            self._state = RenderState.IDLE

    def find_template(self, name: str) -> "Template | None":
        if self.engine is None:
            return None
        return self.engine.find_template(name)

    def capture(self, producer: Callable[[], Any]) -> Fragment:
        """Run ``producer`` with this template's writes redirected to a buffer.

        Args:
            producer: Callable that writes through this template

        Returns:
            Everything the producer wrote
        """
        previous = self._sink
        buffer = io.StringIO()
        self._sink = buffer
        try:
            producer()
        finally:
            self._sink = previous
        return Fragment(buffer.getvalue())

    def define_section(self, name: str, producer: SectionProducer) -> None:
        """Register a section for a layout to place.

        Callables are evaluated immediately and their output captured, so
        the context only ever holds rendered fragments. Strings and Markup
        are taken as already-rendered markup.

        Args:
            name: Section name
            producer: Fragment, markup text, or a callable writing the content
        """
        if isinstance(producer, Fragment):
            fragment = producer
        elif isinstance(producer, str):
            fragment = Fragment(str(producer))
        else:
            fragment = self.capture(producer)
        self.context.define_section(name, fragment)

    def render_section(self, name: str, required: bool = True) -> Fragment:
        """Get a section defined earlier in the chain.

        Raises:
            UsageError(SECTION_MISSING) if required and not defined
        """
        fragment = self.context.get_section(name)
        if fragment is None:
            if required:
                raise create_error("SECTION_MISSING", name=name, template_name=self.name)
            return EMPTY_FRAGMENT
        return fragment

    def is_section_defined(self, name: str) -> bool:
        return self.context.is_section_defined(name)

    def render_body(self) -> Fragment:
        """Get the body of the template that chained into this layout.

        Raises:
            UsageError(BODY_STACK_EMPTY) if there is no pending body
        """
        return self.context.pop_body()

    def include(self, name: str, model: Any = None) -> Fragment:
        """Render another compiled template and return its output.

        The included template gets its own context sharing this view bag;
        its sections and bodies stay separate from this chain.

        Args:
            name: Logical name of the template to include
            model: Model for the included template (defaults to this model)

        Raises:
            UsageError(TEMPLATE_NOT_FOUND) if the name cannot be resolved
        """
        instance = self.find_template(name)
        if instance is None:
            raise create_error("TEMPLATE_NOT_FOUND", name=name, template_name=self.name)

        instance.model = model if model is not None else self.model
        return Fragment(instance.run(ExecutionContext(self.view_bag)))

    # ─────────────────────────────────────────────────────────────────
    # Write callbacks
    # ─────────────────────────────────────────────────────────────────

    def write(self, value: Any) -> None:
        """Write an expression value (HTML encoded unless it is markup)."""
        self.write_to(self.sink, value)

    def write_literal(self, value: Any) -> None:
        """Write template text unchanged."""
        self.write_literal_to(self.sink, value)

    def write_to(self, sink: TextIO, value: Any) -> None:
        _write_to(sink, value)

    def write_literal_to(self, sink: TextIO, value: Any) -> None:
        _write_literal_to(sink, value)

    def write_attribute(
        self,
        name: str,
        prefix: PositionTagged[str] | tuple[str, int] | str,
        suffix: PositionTagged[str] | tuple[str, int] | str,
        *segments: AttributeSegment,
    ) -> None:
        """Write a conditional attribute (see attributes.write_attribute_to)."""
        self.write_attribute_to(self.sink, name, prefix, suffix, *segments)

    def write_attribute_to(
        self,
        sink: TextIO,
        name: str,
        prefix: PositionTagged[str] | tuple[str, int] | str,
        suffix: PositionTagged[str] | tuple[str, int] | str,
        *segments: AttributeSegment,
    ) -> None:
        write_attribute_to(
            sink,
            name,
            prefix,
            suffix,
            segments,
            write=self.write_to,
            write_literal=self.write_literal_to,
        )

    @staticmethod
    def raw(text: Any) -> Markup:
        """Mark text as pre-rendered markup."""
        return _raw(text)
