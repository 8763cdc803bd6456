"""
jfonview - Timeline viewer for JFON trace logs.

Instrumented programs write one line per activity start and end to
out/<pid>.jfon. This package matches those lines into intervals, lays the
intervals out on non-overlapping lanes and shows the result as a live
terminal timeline.

Package Structure:
    - cli.py: Command-line interface and entry point
    - timeline/: The log-to-layout pipeline (parser, matcher, lanes, model)
    - tui/: File tailing, source listing and the curses view
    - utils/: Paths, configuration and session logging

Usage:
    Run as a module: python -m jfonview <command>

Example:
    python -m jfonview view out/
"""

__version__ = "0.1.0"
