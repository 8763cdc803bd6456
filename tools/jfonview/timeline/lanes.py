"""
Lane assignment for timeline display.

This module places intervals on display lanes (rows) so that no two
intervals sharing a lane overlap in time, using as few lanes as the fixed
processing order allows.

Purpose:
    Overlapping activities must be drawn on separate rows to stay readable.
    Greedy interval partitioning gives the minimum number of rows for a
    left-to-right sweep, and a fixed tie-break keeps the layout stable from
    one refresh to the next.

Design Decisions:
    - Intervals are swept by (start, seqno, source_id)
    - Each interval takes the lowest-indexed lane that is free at its start
    - An open interval holds its lane until it closes
    - An inverted interval occupies no width; its lane is free again at its start
    - Two min-heaps: busy lanes keyed by end time, free lanes keyed by index
"""

import heapq
import math
from typing import Iterable, List, Optional

from .model import Interval, LanedInterval


def lane_end(interval: Interval) -> float:
    """
    Return the time at which an interval releases its lane.

    Open intervals never release it (their end is unbounded); inverted
    intervals release it at their own start.
    """
    if interval.end is None:
        return math.inf
    return max(interval.start, interval.end)


def effective_end(interval: Interval, now: Optional[int]) -> int:
    """
    Return the end used to draw an interval.

    Open intervals are drawn up to ``now`` (normally the timeline's
    global_end). Inverted intervals are drawn as a single point.
    """
    if interval.end is None:
        return max(interval.start, now if now is not None else interval.start)
    return max(interval.start, interval.end)


def assign_lanes(intervals: Iterable[Interval]) -> List[LanedInterval]:
    """
    Assign each interval a lane index >= 0.

    Args:
        intervals: Any mix of open and closed intervals, from any sources.

    Returns:
        List[LanedInterval]: One entry per interval, ordered by
        (start, seqno, source_id), with all-digit source ids compared by
        value. Intervals on the same lane never overlap
        as half-open ranges [start, end).

    Example:
        >>> laned = assign_lanes([Interval(1, "a", 100, 200), Interval(2, "a", 150, 180)])
        >>> [(li.interval.seqno, li.lane) for li in laned]
        [(1, 0), (2, 1)]
    """
    ordered = sorted(intervals, key=lambda i: i.sort_key)

    # (end_time, lane) for lanes currently holding an interval
    busy = []
    # Lane indices whose last interval has ended by the current sweep point
    free = []
    lanes_allocated = 0
    out = []

    for interval in ordered:
        # Release every lane that is done by this start. Starts never
        # decrease, so a released lane stays free for all later intervals.
        while busy and busy[0][0] <= interval.start:
            heapq.heappush(free, heapq.heappop(busy)[1])

        if free:
            lane = heapq.heappop(free)
        else:
            lane = lanes_allocated
            lanes_allocated += 1

        heapq.heappush(busy, (lane_end(interval), lane))
        out.append(LanedInterval(interval=interval, lane=lane))

    return out


def lane_count(laned: Iterable[LanedInterval]) -> int:
    """Return the number of lanes used by an assignment."""
    return max((li.lane for li in laned), default=-1) + 1
