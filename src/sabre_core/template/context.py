"""Execution context shared by a template and its layout chain."""

from collections.abc import Mapping
from typing import Any

from sabre_core.errors import create_error

from .types import Fragment, ViewBag


class ExecutionContext:
    """Per-render state: view bag, pending bodies and defined sections.

    One context is created for each top-level render and handed unchanged
    to every layout in the chain. It is never shared between independent
    renders, so it needs no locking.
    """

    def __init__(self, view_bag: ViewBag | Mapping[str, Any] | None = None):
        """Initialize context.

        Args:
            view_bag: Initial view data; a mapping is copied into a ViewBag
        """
        if isinstance(view_bag, ViewBag):
            self._view_bag = view_bag
        else:
            self._view_bag = ViewBag(view_bag)
        self._bodies: list[Fragment] = []
        self._sections: dict[str, Fragment] = {}

    @property
    def view_bag(self) -> ViewBag:
        return self._view_bag

    @property
    def pending_bodies(self) -> int:
        """Number of captured bodies not yet rendered by a layout."""
        return len(self._bodies)

    @property
    def section_names(self) -> list[str]:
        return list(self._sections)

    def define_section(self, name: str, fragment: Fragment) -> None:
        """Register a rendered section.

        Args:
            name: Section name, unique within this context
            fragment: Rendered section content

        Raises:
            UsageError(SECTION_NAME_INVALID) if name is blank
            UsageError(SECTION_ALREADY_DEFINED) if name is taken
        """
        if not name or not name.strip():
            raise create_error("SECTION_NAME_INVALID")

        if name in self._sections:
            raise create_error("SECTION_ALREADY_DEFINED", name=name)

        self._sections[name] = fragment

    def get_section(self, name: str) -> Fragment | None:
        return self._sections.get(name)

    def is_section_defined(self, name: str) -> bool:
        return name in self._sections

    def push_body(self, fragment: Fragment) -> None:
        """Push a captured child body for the next layout to render."""
        self._bodies.append(fragment)

    def pop_body(self) -> Fragment:
        """Pop the most recently captured body.

        Raises:
            UsageError(BODY_STACK_EMPTY) if no body is pending
        """
        if not self._bodies:
            raise create_error("BODY_STACK_EMPTY")
        return self._bodies.pop()
