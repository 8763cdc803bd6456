"""
Data models for the JFON timeline pipeline.

This module defines the data structures passed between the parser, the
interval matcher, the lane assigner and the timeline model.

Purpose:
    Events from different traced processes need a common representation
    for matching, ordering and display. This module defines that structure
    so every stage of the pipeline agrees on field names and meaning.

Note:
    Event is frozen because a parsed record never changes. Interval is
    mutable because the matcher closes it in place when its end arrives.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


def source_order(source_id: str) -> Tuple[int, int, str]:
    """
    Sort key for source ids.

    Trace files are named after process ids, so all-digit ids compare by
    value ("9" before "10") and come before any other name.
    """
    if source_id.isascii() and source_id.isdigit():
        return (0, int(source_id), source_id)
    return (1, 0, source_id)


class EventKind(str, Enum):
    """The closed set of record kinds in a JFON line."""
    START = "start"
    END = "end"


class AnomalyKind(str, Enum):
    """
    Recoverable irregularities found while building a timeline.

    None of these stop processing. They are collected and returned next
    to the refreshed timeline so the viewer can show them.
    """
    MALFORMED = "malformed"
    DUPLICATE_START = "duplicate_start"
    ORPHAN_END = "orphan_end"
    INVERTED_INTERVAL = "inverted_interval"
    SOURCE_UNAVAILABLE = "source_unavailable"


@dataclass(frozen=True)
class Event:
    """
    One parsed start/end record from a log source.

    Attributes:
        seqno: Sequence number of the activity (u32). Only unique as an
               open/close key within its source.
        kind: EventKind.START or EventKind.END.
        timestamp: Clock value from the traced process (u64).
        source_id: Identifier of the log source that produced the event.
    """
    seqno: int
    kind: EventKind
    timestamp: int
    source_id: str


@dataclass
class Interval:
    """
    A matched (or still open) start/end pair, rendered as one bar.

    Attributes:
        seqno: Sequence number shared by the start and end events.
        source_id: Source the pair came from.
        start: Timestamp of the start event.
        end: Timestamp of the end event, or None while the interval is open.
        inverted: True when the end timestamp precedes the start timestamp.
                  The interval is still closed; the bounds are not swapped.
    """
    seqno: int
    source_id: str
    start: int
    end: Optional[int] = None
    inverted: bool = False

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def sort_key(self):
        # Fixed tie-break: start, then seqno, then source
        return (self.start, self.seqno, source_order(self.source_id))

    def duration(self) -> Optional[int]:
        """Return end - start for closed intervals, None while open."""
        if self.end is None:
            return None
        return self.end - self.start


@dataclass(frozen=True)
class LanedInterval:
    """An interval together with the display lane it was assigned to."""
    interval: Interval
    lane: int


@dataclass(frozen=True)
class Anomaly:
    """
    A recoverable irregularity reported by the pipeline.

    Attributes:
        kind: Which anomaly this is.
        source_id: Source the anomaly belongs to.
        message: Human readable description for the viewer and session log.
        line: Raw line text for parse anomalies.
        seqno: Sequence number involved, when known.
        line_number: 1-based line position within the source, when known.
    """
    kind: AnomalyKind
    source_id: str
    message: str
    line: Optional[str] = None
    seqno: Optional[int] = None
    line_number: Optional[int] = None


class OutcomeKind(str, Enum):
    OPENED = "opened"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class MatchOutcome:
    """
    Result of feeding one event to an IntervalMatcher.

    OPENED and CLOSED carry the affected interval and may also carry an
    anomaly (duplicate start, inverted interval). ERROR carries only the
    anomaly (orphan end).
    """
    kind: OutcomeKind
    interval: Optional[Interval] = None
    anomaly: Optional[Anomaly] = None


@dataclass
class RefreshResult:
    """
    Snapshot of the timeline returned by TimelineModel.refresh().

    Attributes:
        intervals: Laned intervals ordered by (start, seqno, source_id).
        anomalies: Anomalies raised since the previous refresh.
        global_start: Smallest timestamp seen so far, None before any event.
        global_end: Largest timestamp seen so far, None before any event.
        lane_count: Number of lanes in use.
        notice: Set when the timeline is empty for a reason the user should
                see (no sources configured, or none readable).
    """
    intervals: List[LanedInterval] = field(default_factory=list)
    anomalies: List[Anomaly] = field(default_factory=list)
    global_start: Optional[int] = None
    global_end: Optional[int] = None
    lane_count: int = 0
    notice: Optional[str] = None
