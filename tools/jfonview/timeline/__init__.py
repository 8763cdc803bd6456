"""
Core log-to-layout pipeline for JFON traces.

This subpackage turns raw JFON lines into a laned timeline. It performs no
file I/O; readers from the tui subpackage (or any object with the same
methods) supply the lines.

Modules:
    - parser: Record parser for single JFON lines
    - matcher: Start/end pairing into intervals, per source
    - lanes: Greedy lane assignment for non-overlapping display rows
    - aggregate: TimelineModel combining sources, bounds and anomalies
    - model: Shared data classes
    - errors: Exception types

Data flow:
    lines -> parse_line -> Event -> IntervalMatcher -> Interval
          -> assign_lanes -> LanedInterval -> TimelineModel.refresh()
"""

from .aggregate import TimelineModel
from .errors import ConfigError, JfonError, MalformedLineError, SourceUnavailableError
from .lanes import assign_lanes, effective_end, lane_count
from .matcher import IntervalMatcher
from .model import (
    Anomaly,
    AnomalyKind,
    Event,
    EventKind,
    Interval,
    LanedInterval,
    MatchOutcome,
    OutcomeKind,
    RefreshResult,
)
from .parser import parse_line, parse_lines

__all__ = [
    "Anomaly",
    "AnomalyKind",
    "ConfigError",
    "Event",
    "EventKind",
    "Interval",
    "IntervalMatcher",
    "JfonError",
    "LanedInterval",
    "MalformedLineError",
    "MatchOutcome",
    "OutcomeKind",
    "RefreshResult",
    "SourceUnavailableError",
    "TimelineModel",
    "assign_lanes",
    "effective_end",
    "lane_count",
    "parse_line",
    "parse_lines",
]
