"""Template runtime value types."""

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Fragment:
    """Rendered markup captured from a body, a section or an include.

    Fragments implement ``__html__`` so the value write path emits them
    verbatim instead of escaping them a second time.
    """

    text: str = ""

    def __html__(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text

    def __bool__(self) -> bool:
        return bool(self.text)


EMPTY_FRAGMENT = Fragment("")


@dataclass(frozen=True)
class PositionTagged(Generic[T]):
    """A value together with its offset in the template source."""

    value: T
    position: int = 0

    @classmethod
    def of(cls, value: "PositionTagged[T] | tuple[T, int] | T") -> "PositionTagged[T]":
        """Accept an existing tag, a ``(value, position)`` tuple or a bare value."""
        if isinstance(value, PositionTagged):
            return value
        if isinstance(value, tuple) and len(value) == 2 and isinstance(value[1], int):
            return cls(value[0], value[1])
        return cls(value)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class AttributeSegment:
    """One literal or interpolated piece of an attribute value, in source order.

    Attributes:
        prefix: Literal text written before the value (e.g. the space
            between two classes)
        value: The value; ``None`` skips the segment, ``False`` drops the
            whole attribute, ``True`` writes the attribute name
        literal: Write the value without HTML encoding
    """

    prefix: PositionTagged[str]
    value: PositionTagged[Any]
    literal: bool = False

    @classmethod
    def from_tuple(
        cls,
        data: tuple[tuple[str, int], tuple[Any, int], bool],
    ) -> "AttributeSegment":
        """Build from ``((prefix, prefix_pos), (value, value_pos), literal)``."""
        prefix, value, literal = data
        return cls(PositionTagged.of(prefix), PositionTagged.of(value), literal)

    @classmethod
    def dynamic(cls, prefix: str, value: Any, position: int = 0) -> "AttributeSegment":
        """Segment holding an expression value (HTML encoded when written)."""
        return cls(PositionTagged(prefix, position), PositionTagged(value, position), False)

    @classmethod
    def text(cls, prefix: str, value: str, position: int = 0) -> "AttributeSegment":
        """Segment holding literal template text (written as is)."""
        return cls(PositionTagged(prefix, position), PositionTagged(value, position), True)


class ViewBag(MutableMapping[str, Any]):
    """Key/value data shared by a template and every layout it chains into."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ViewBag({self._values!r})"

    def get_typed(self, key: str, expected: type[T], default: T | None = None) -> T | None:
        """Get a value checked against ``expected``.

        Args:
            key: Entry name
            expected: Required type of the stored value
            default: Returned when the key is absent

        Returns:
            The stored value, or default

        Raises:
            TypeError: If the stored value is not an ``expected``
        """
        if key not in self._values:
            return default
        value = self._values[key]
        if not isinstance(value, expected):
            raise TypeError(
                f"View bag entry '{key}' is {type(value).__name__}, expected {expected.__name__}"
            )
        return value


@dataclass(frozen=True)
class TypedModel:
    """Model bound as-is; templates access it through explicit attributes."""

    value: Any


class DynamicModel(Mapping[str, Any]):
    """Read-only mapping model; templates access it by key."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"DynamicModel({self._values!r})"

    def get_typed(self, key: str, expected: type[T], default: T | None = None) -> T | None:
        """Get a value checked against ``expected`` (see ViewBag.get_typed)."""
        if key not in self._values:
            return default
        value = self._values[key]
        if not isinstance(value, expected):
            raise TypeError(
                f"Model entry '{key}' is {type(value).__name__}, expected {expected.__name__}"
            )
        return value


ModelBinding = TypedModel | DynamicModel
