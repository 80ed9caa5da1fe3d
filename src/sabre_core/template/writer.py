"""Value write path - how template values reach the output sink."""

from typing import Any, TextIO

from markupsafe import Markup, escape


def write_to(sink: TextIO, value: Any) -> None:
    """Write a value with HTML encoding.

    ``None`` writes nothing. Objects implementing ``__html__`` (Markup,
    Fragment) are already markup and are written unchanged; anything else
    is converted with ``str()`` and encoded.

    Args:
        sink: Output sink
        value: Value to write
    """
    if value is None:
        return
    sink.write(str(escape(value)))


def write_literal_to(sink: TextIO, value: Any) -> None:
    """Write a value without encoding.

    Used for static template text and content known to be safe.

    Args:
        sink: Output sink
        value: Value to write
    """
    if value is None:
        return
    sink.write(value if isinstance(value, str) else str(value))


def raw(text: Any) -> Markup:
    """Mark text as pre-rendered markup so write_to emits it verbatim."""
    return Markup("" if text is None else text)
