"""
Record parser for JFON log lines.

Parses lines in the format:
    seqno:<u32>,<start|end>,<u64>

Example:
    seqno:7,start,1234567890123

Design Decisions:
    - Pure functions: no file access, the tailer hands us complete lines
    - Surrounding whitespace (including a stray CR) is tolerated
    - Any other deviation is malformed; one bad line never stops the stream
"""

import re
from typing import Iterable, Iterator, Optional, Tuple, Union

from .errors import MalformedLineError
from .model import Event, EventKind

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

# Widest in-range decimal, leading zeros aside. Longer fields are rejected
# before int() so huge numbers never reach the conversion limit.
U32_DIGITS = len(str(U32_MAX))
U64_DIGITS = len(str(U64_MAX))

# Three mandatory positional fields, ASCII digits only. The kind token is
# captured loosely so an unknown kind can be reported with a precise reason.
LINE_PATTERN = re.compile(
    r"^seqno:(?P<seqno>[0-9]+),"
    r"(?P<kind>[^,]*),"
    r"(?P<ts>[0-9]+)$"
)

_KINDS = {kind.value: kind for kind in EventKind}


def _to_int(digits: str, max_digits: int) -> Optional[int]:
    """Convert a field of ASCII digits, or None if it is too wide to fit."""
    if len(digits.lstrip("0")) > max_digits:
        return None
    return int(digits)


def parse_line(line: str, source_id: str) -> Event:
    """
    Parse one JFON line into an Event.

    Args:
        line: A single line of text, with or without its line terminator.
        source_id: Identifier of the source the line was read from.

    Returns:
        Event: The parsed record tagged with source_id.

    Raises:
        MalformedLineError: If the line does not match the record shape,
            the kind is not exactly "start" or "end", or a number is out
            of range.
    """
    text = line.strip()
    match = LINE_PATTERN.match(text)
    if not match:
        raise MalformedLineError(text)

    kind = _KINDS.get(match.group("kind"))
    if kind is None:
        raise MalformedLineError(text, f"unknown kind {match.group('kind')!r}")

    seqno = _to_int(match.group("seqno"), U32_DIGITS)
    if seqno is None or seqno > U32_MAX:
        raise MalformedLineError(text, "seqno out of u32 range")

    timestamp = _to_int(match.group("ts"), U64_DIGITS)
    if timestamp is None or timestamp > U64_MAX:
        raise MalformedLineError(text, "timestamp out of u64 range")

    return Event(seqno=seqno, kind=kind, timestamp=timestamp, source_id=source_id)


def parse_lines(
    lines: Iterable[str], source_id: str, first_line_number: int = 1
) -> Iterator[Tuple[int, Union[Event, MalformedLineError]]]:
    """
    Parse a batch of lines, yielding failures instead of raising them.

    Blank lines are skipped silently; they carry no record and are common
    at the end of files written by hand.

    Args:
        lines: Complete lines in the order they were appended.
        source_id: Identifier of the source the lines came from.
        first_line_number: Line number of the first element, so callers
            feeding successive chunks can keep numbering continuous.

    Yields:
        (line_number, Event) for good lines and
        (line_number, MalformedLineError) for bad ones.
    """
    for line_number, line in enumerate(lines, start=first_line_number):
        if not line.strip():
            continue
        try:
            yield line_number, parse_line(line, source_id)
        except MalformedLineError as exc:
            yield line_number, exc
