"""
Filesystem path definitions for jfonview.

This module defines the canonical locations jfonview reads traces from
and writes its own logs to. All path logic is centralized here.

Design Decisions:
    - All functions return pathlib.Path objects for cross-platform compatibility
    - Paths are resolved relative to the repository root, not the current directory
"""

from pathlib import Path
from typing import Optional


def repo_root() -> Path:
    """
    Resolve the repository root directory.

    This file lives at: <repo>/tools/jfonview/utils/paths.py
    So we go up 3 parent directories to reach the repo root.
    """
    return Path(__file__).resolve().parents[3]


def default_trace_dir() -> Path:
    """
    Return the directory instrumented programs write their traces to.

    Producers follow the ``out/<pid>.jfon`` convention relative to where
    they run; for the viewer that is <repo>/out.
    """
    return repo_root() / "out"


def resolve_trace_path(arg: Optional[str], configured: Optional[str] = None) -> Optional[Path]:
    """
    Choose the trace path to open.

    Args:
        arg: Path given on the command line, if any.
        configured: Path from configuration (JFON_TRACE_PATH), if any.

    Returns:
        The expanded path, or None when neither was given. None means an
        empty timeline awaiting live data.
    """
    chosen = arg or configured
    if not chosen:
        return None
    return Path(chosen).expanduser()
