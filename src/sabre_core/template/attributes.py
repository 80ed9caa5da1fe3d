"""Conditional HTML attribute serialization.

An attribute such as ``class="a @x b @y"`` arrives as an overall prefix
(``class="``), an overall suffix (``"``) and an ordered list of segments.
Each segment carries the literal text that precedes it, so the order of
the list decides what ends up between the interpolated pieces.
"""

import io
from collections.abc import Callable, Sequence
from typing import Any, TextIO

from .types import AttributeSegment, PositionTagged
from .writer import write_literal_to, write_to

WriteFn = Callable[[TextIO, Any], None]


def write_attribute_to(
    sink: TextIO,
    name: str,
    prefix: PositionTagged[str] | tuple[str, int] | str,
    suffix: PositionTagged[str] | tuple[str, int] | str,
    segments: Sequence[AttributeSegment],
    write: WriteFn = write_to,
    write_literal: WriteFn = write_literal_to,
) -> None:
    """Write one attribute, dropping it when no segment produces output.

    Rules, applied per segment in order:

    - ``False`` suppresses the attribute entirely; later segments are not
      consulted and nothing is written for this attribute.
    - ``None`` is skipped together with its own prefix.
    - ``True`` produces output and writes the attribute name as the value
      (``disabled="disabled"``).
    - Anything else writes its prefix, or the overall prefix when it is the
      first segment to produce output, then the value through the literal
      or the encoded path.

    The suffix is written only if some segment produced output. An empty
    segment list writes prefix and suffix, which renders an explicitly
    empty attribute (``disabled=""``).

    Args:
        sink: Output sink
        name: Attribute name
        prefix: Text opening the attribute, e.g. `` class="``
        suffix: Text closing the attribute, e.g. ``"``
        segments: Attribute value pieces in source order
        write: Encoded write path
        write_literal: Literal write path
    """
    prefix = PositionTagged.of(prefix)
    suffix = PositionTagged.of(suffix)

    if not segments:
        write_literal(sink, prefix.value)
        write_literal(sink, suffix.value)
        return

    # Staged so a later False can still drop everything
    staged = io.StringIO()
    wrote_something = False

    for segment in segments:
        value = segment.value.value

        if value is None:
            continue
        if value is False:
            return
        if value is True:
            value = name

        write_literal(staged, segment.prefix.value if wrote_something else prefix.value)

        if segment.literal:
            write_literal(staged, value)
        else:
            write(staged, value)
        wrote_something = True

    if wrote_something:
        sink.write(staged.getvalue())
        write_literal(sink, suffix.value)
