#!/usr/bin/env python3
"""
jfonview - Timeline viewer for JFON trace logs.

This module implements the command-line interface for jfonview, providing
commands to view a live timeline, print it as text, and list the trace
files behind a path.

Responsibilities:
    - Open a .jfon file or a directory of them (view, dump)
    - Follow growing traces while the traced programs run (view, dump --follow)
    - List discovered trace sources (sources)

Design Philosophy:
    The filesystem is the only interface to the traced programs. They append
    lines to out/<pid>.jfon; jfonview polls those files and never writes to
    them. Without a path the viewer starts with an empty timeline awaiting
    live data.

Usage:
    python -m jfonview <command> [options]

Examples:
    python -m jfonview view out/
    python -m jfonview dump out/7874.jfon --anomalies
    python -m jfonview dump out/ --follow
    python -m jfonview sources out/
"""

import argparse
import datetime
import sys
import time
from pathlib import Path
from typing import List, Optional

from .timeline.aggregate import TimelineModel
from .timeline.errors import ConfigError
from .tui.source_index import discover_sources
from .tui.tailer import SourceDirectory
from .tui.views import describe_interval, render_rows, run_timeline_viewer, summary_line
from .utils.config import ViewerConfig, load_dotenv
from .utils.paths import resolve_trace_path
from .utils.sessionlog import SessionLogger

DEFAULT_WIDTH = 100


# ============================================================
# Model construction
# ============================================================

def build_model(path: Optional[Path], config: ViewerConfig, logger=None) -> TimelineModel:
    """
    Create a TimelineModel reading from a trace file or directory.

    Args:
        path: Trace file or directory; None for an empty timeline.
        config: Resolved viewer settings.
        logger: Optional SessionLogger for anomalies and source events.
    """
    sources = SourceDirectory(path, config.file_pattern) if path is not None else None
    if logger:
        where = sources.describe() if sources else "no trace path"
        logger.info("jfonview", f"session started: {where}")
    return TimelineModel(sources, logger=logger, max_anomalies=config.max_anomalies)


def make_logger(args) -> Optional[SessionLogger]:
    if args.no_log:
        return None
    return SessionLogger()


# ============================================================
# Commands
# ============================================================

def print_timeline(result, width: int, show_anomalies: bool) -> None:
    """Print a snapshot: summary, lane rows, interval list and anomalies."""
    print(summary_line(result))
    if result.notice:
        print(f"[jfonview] {result.notice}")

    rows = render_rows(result, width)
    if rows:
        print()
        for row in rows:
            print(row)
        print()
        for laned in result.intervals:
            print(describe_interval(laned, result.global_start))

    if show_anomalies and result.anomalies:
        print()
        print(f"Anomalies ({len(result.anomalies)}):")
        for anomaly in result.anomalies:
            print(f"  {anomaly.kind.value:<18} {anomaly.source_id}: {anomaly.message}")


def dump_timeline(args, config: ViewerConfig) -> int:
    """
    Print the timeline as text, optionally following the sources.

    Returns:
        Exit code: 1 when a trace path was given but none of its sources
        could be read, 0 otherwise.
    """
    path = resolve_trace_path(args.path, config.trace_path)
    model = build_model(path, config, make_logger(args))
    result = model.refresh()
    print_timeline(result, args.width, args.anomalies)

    if args.follow:
        interval = args.interval or config.poll_interval
        previous = (len(result.intervals), result.global_start, result.global_end)
        try:
            while True:
                time.sleep(interval)
                result = model.refresh()
                for anomaly in result.anomalies:
                    print(f"! {anomaly.kind.value} {anomaly.source_id}: {anomaly.message}")
                # Only report when the layout actually changed
                current = (len(result.intervals), result.global_start, result.global_end)
                if current != previous or result.anomalies:
                    stamp = datetime.datetime.now().strftime("%H:%M:%S")
                    print(f"[{stamp}] {summary_line(result)}")
                    previous = current
        except KeyboardInterrupt:
            print("\n[jfonview] Follow stopped")
            print_timeline(result, args.width, False)

    if path is not None and result.notice and not result.intervals:
        return 1
    return 0


def view_timeline(args, config: ViewerConfig) -> int:
    """Run the curses viewer until the user quits."""
    import curses

    path = resolve_trace_path(args.path, config.trace_path)
    model = build_model(path, config, make_logger(args))
    title = str(path) if path is not None else "(no trace path)"
    interval = args.interval or config.poll_interval

    try:
        curses.wrapper(run_timeline_viewer, model, interval, title)
    except KeyboardInterrupt:
        # let Ctrl+C exit cleanly
        pass
    return 0


def list_sources(args, config: ViewerConfig) -> int:
    """Print the trace files behind a path, most recently written first."""
    path = resolve_trace_path(args.path, config.trace_path)
    if path is None:
        print("[jfonview] No trace path given (argument or JFON_TRACE_PATH)")
        return 1

    sources = discover_sources(path, config.file_pattern)
    print(f"[jfonview] Sources in {path}")
    if not sources:
        print("  (none)")
        return 0

    for source in sources:
        modified = datetime.datetime.fromtimestamp(source["last_mtime"]).isoformat(timespec="seconds")
        print(f"  {source['source_id']:<12} {source['size']:>10} bytes  {modified}  {source['path']}")
    return 0


# ============================================================
# Command-Line Argument Parsing
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    """
    Build and configure the top-level argument parser.

    Subcommands:
        - view: live curses timeline
        - dump: text timeline (optionally following)
        - sources: list trace files
    """
    parser = argparse.ArgumentParser(
        prog="jfonview",
        description="Timeline viewer for JFON trace logs",
    )
    parser.add_argument("--no-log", action="store_true",
                        help="Do not write a session log")

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
    )

    # --- view: live curses timeline ---
    view_parser = subparsers.add_parser(
        "view",
        help="Show a live timeline of a trace file or directory",
    )
    view_parser.add_argument("path", nargs="?",
                             help="A .jfon file or a directory of them")
    view_parser.add_argument("--interval", type=float,
                             help="Seconds between refreshes (default: JFON_POLL_INTERVAL)")

    # --- dump: text output ---
    dump_parser = subparsers.add_parser(
        "dump",
        help="Print the timeline as text",
    )
    dump_parser.add_argument("path", nargs="?",
                             help="A .jfon file or a directory of them")
    dump_parser.add_argument("--width", type=int, default=DEFAULT_WIDTH,
                             help=f"Row width in characters (default: {DEFAULT_WIDTH})")
    dump_parser.add_argument("--anomalies", action="store_true",
                             help="List anomalies found while reading")
    dump_parser.add_argument("--follow", action="store_true",
                             help="Keep polling and report changes until Ctrl+C")
    dump_parser.add_argument("--interval", type=float,
                             help="Seconds between refreshes with --follow")

    # --- sources: discovery ---
    sources_parser = subparsers.add_parser(
        "sources",
        help="List trace files behind a path",
    )
    sources_parser.add_argument("path", nargs="?",
                                help="A .jfon file or a directory of them")

    return parser


# ============================================================
# Entry Point
# ============================================================

def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the jfonview CLI.

    This function:
    1. Loads environment configuration from .env
    2. Parses command-line arguments
    3. Dispatches to the appropriate command handler

    Exit Codes:
        0: Success
        1: No readable trace source, or no path for `sources`
        2: Invalid arguments or configuration
    """
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ViewerConfig.from_env()
    except ConfigError as exc:
        print(f"[jfonview] configuration error: {exc}", file=sys.stderr)
        sys.exit(2)

    if args.command == "dump":
        sys.exit(dump_timeline(args, config))

    if args.command == "view":
        sys.exit(view_timeline(args, config))

    if args.command == "sources":
        sys.exit(list_sources(args, config))

    # Unknown command - show help
    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
