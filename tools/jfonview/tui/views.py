"""
Text layout and curses view for JFON timelines.

This module turns a RefreshResult into rows of characters: one row per
lane, time running left to right from global_start to global_end. The same
layout is printed by `jfonview dump` and drawn live by `jfonview view`.

Architecture:
    - Single thread: the UI loop calls TimelineModel.refresh() itself
      every poll interval, there is no background tail thread
    - render_rows() is pure so it can be tested without a terminal
"""

import curses
import time
from collections import deque
from typing import List, Optional

from ..timeline.lanes import effective_end
from ..timeline.model import LanedInterval, RefreshResult

LANE_LABEL_WIDTH = 6
SPINNER = ["|", "/", "-", "\\"]


def _column(timestamp: int, origin: int, span: int, columns: int) -> int:
    # Affine map of [origin, origin + span] onto [0, columns - 1]
    return (timestamp - origin) * (columns - 1) // span


def _bar(laned: LanedInterval, length: int) -> str:
    interval = laned.interval
    if interval.inverted:
        return "!"
    if length == 1:
        return ">" if interval.is_open else "|"
    body = ["="] * length
    body[0] = "["
    body[-1] = ">" if interval.is_open else "]"
    # Label the bar with its seqno when there is room inside the brackets
    label = str(interval.seqno)
    if len(label) <= length - 2:
        body[1:1 + len(label)] = label
    return "".join(body)


def render_rows(
    result: RefreshResult,
    width: int,
    first_lane: int = 0,
    max_lanes: Optional[int] = None,
) -> List[str]:
    """
    Lay out a timeline snapshot as text rows, one per lane.

    Args:
        result: Snapshot returned by TimelineModel.refresh().
        width: Total characters per row, including the lane label.
        first_lane: First lane to render (for scrolling).
        max_lanes: Maximum number of lanes to render, all when None.

    Returns:
        List[str]: Rows such as ``"  0 | [1=====]   [4==>"``. Open intervals
        run to global_end and end in ``>``; inverted intervals show as ``!``.
        Empty when the timeline has no intervals.
    """
    if not result.intervals or result.global_start is None:
        return []

    columns = max(1, width - LANE_LABEL_WIDTH)
    origin = result.global_start
    span = max(1, result.global_end - origin)

    last_lane = result.lane_count
    if max_lanes is not None:
        last_lane = min(last_lane, first_lane + max_lanes)
    lanes = {lane: [" "] * columns for lane in range(first_lane, last_lane)}

    for laned in result.intervals:
        row = lanes.get(laned.lane)
        if row is None:
            continue
        interval = laned.interval
        begin = _column(interval.start, origin, span, columns)
        end = _column(effective_end(interval, result.global_end), origin, span, columns)
        bar = _bar(laned, end - begin + 1)
        row[begin:begin + len(bar)] = bar

    return [
        f"{lane:>3} | " + "".join(cells).rstrip()
        for lane, cells in lanes.items()
    ]


def describe_interval(laned: LanedInterval, origin: int) -> str:
    """
    One-line description of an interval with times relative to origin.

    Example:
        lane   1  source 7874      seqno      2  +50 .. +80 (30)
    """
    interval = laned.interval
    start = interval.start - origin
    if interval.end is None:
        end, duration = "open", ""
    else:
        end = f"+{interval.end - origin}"
        duration = f" ({interval.duration()})"
    flags = " inverted" if interval.inverted else ""
    return (
        f"lane {laned.lane:>3}  source {interval.source_id:<8} "
        f"seqno {interval.seqno:>6}  +{start} .. {end}{duration}{flags}"
    )


def summary_line(result: RefreshResult) -> str:
    """Short status line: lane, interval and open counts plus the time span."""
    open_count = sum(1 for li in result.intervals if li.interval.is_open)
    if result.global_start is None:
        span = "-"
    else:
        span = str(result.global_end - result.global_start)
    return (
        f"lanes={result.lane_count} intervals={len(result.intervals)} "
        f"open={open_count} span={span}"
    )


def _put(stdscr, y: int, x: int, text: str, w: int) -> None:
    try:
        stdscr.addstr(y, x, text[: max(0, w - 1)])
    except curses.error:
        # Writing to the last cell of the screen raises; nothing to do
        pass


def run_timeline_viewer(stdscr, model, poll_interval: float = 0.25, title: str = "") -> None:
    """
    Run the interactive timeline viewer.

    Args:
        stdscr: The curses standard screen object (provided by curses.wrapper).
        model: The TimelineModel to refresh and draw.
        poll_interval: Seconds between refresh() calls.
        title: Description of the trace path, shown in the header.

    Keys:
        q / Ctrl+C: quit
        r: reload every source from the beginning
        Up / Down, PgUp / PgDn: scroll lanes

    Note:
        This function should be called via curses.wrapper() to ensure
        proper terminal setup and cleanup.
    """
    curses.curs_set(0)
    stdscr.nodelay(True)

    result = model.refresh()
    recent = deque(result.anomalies, maxlen=5)
    anomaly_total = len(result.anomalies)
    last_refresh = time.monotonic()
    first_lane = 0
    spinner_i = 0

    while True:
        ch = stdscr.getch()
        if ch in (ord("q"), ord("Q"), 3):
            return

        h, w = stdscr.getmaxyx()
        # Header (2 lines), footer (anomalies + status + keys)
        lane_rows = max(1, h - 2 - recent.maxlen - 2)

        if ch in (ord("r"), ord("R")):
            result = model.reload()
            recent.clear()
            recent.extend(result.anomalies)
            anomaly_total = len(result.anomalies)
            first_lane = 0
            last_refresh = time.monotonic()
        elif ch == curses.KEY_UP:
            first_lane -= 1
        elif ch == curses.KEY_DOWN:
            first_lane += 1
        elif ch == curses.KEY_PPAGE:
            first_lane -= lane_rows
        elif ch == curses.KEY_NPAGE:
            first_lane += lane_rows

        now = time.monotonic()
        if now - last_refresh >= poll_interval:
            result = model.refresh()
            recent.extend(result.anomalies)
            anomaly_total += len(result.anomalies)
            last_refresh = now
            spinner_i = (spinner_i + 1) % len(SPINNER)

        first_lane = max(0, min(first_lane, max(0, result.lane_count - lane_rows)))

        # --- Render the screen ---
        stdscr.erase()
        _put(stdscr, 0, 0, f"JFON viewer {SPINNER[spinner_i]} {title}", w)
        _put(stdscr, 1, 0, "-" * (w - 1), w)

        if result.notice and not result.intervals:
            _put(stdscr, 2, 0, result.notice, w)
        else:
            rows = render_rows(result, w - 1, first_lane, lane_rows)
            for idx, line in enumerate(rows, start=2):
                _put(stdscr, idx, 0, line, w)

        footer = h - recent.maxlen - 2
        for idx, anomaly in enumerate(recent):
            _put(stdscr, footer + idx, 0, f"! {anomaly.source_id}: {anomaly.message}", w)

        status = f"{summary_line(result)} anomalies={anomaly_total}"
        if result.notice:
            status += f"  [{result.notice}]"
        _put(stdscr, h - 2, 0, status, w)
        _put(stdscr, h - 1, 0, "q quit  r reload  arrows/PgUp/PgDn scroll", w)
        stdscr.refresh()

        # Brief sleep to cap frame rate and reduce CPU usage
        time.sleep(0.05)
