"""
Session logging utilities for viewer observability.

This module provides a plain-text, append-only log for each viewer session.
The curses screen only has room for the last few anomalies; the session
log keeps all of them, together with source discovery and reload events,
so a long tracing run can be reviewed afterwards.

Design Decisions:
    - One log file per viewer session
    - Append-only writes to prevent data loss
    - Human-readable format with timestamps and structured fields
    - UTC timestamps for consistency across machines
"""

from __future__ import annotations

import datetime
import os
import uuid
from pathlib import Path
from typing import Optional

from .paths import repo_root

LOG_FILENAME = "jfonview.log"


def log_root() -> Path:
    """
    Return the root directory for all jfonview logs.

    Uses the JFON_LOG_ROOT environment variable if set, otherwise
    falls back to the repository's logs/ directory.

    Example:
        >>> os.environ["JFON_LOG_ROOT"] = "/var/log/jfonview"
        >>> log_root()
        PosixPath('/var/log/jfonview')
    """
    root = os.environ.get("JFON_LOG_ROOT")
    if root:
        return Path(root)
    return repo_root() / "logs"


def session_log_path(session_id: str, root: Optional[Path] = None) -> Path:
    """
    Resolve the log file path for a viewer session.

    Args:
        session_id: The unique identifier for the session.
        root: Log root override; defaults to log_root().

    Returns:
        Path: <root>/sessions/<session_id>/jfonview.log
    """
    return (root or log_root()) / "sessions" / session_id / LOG_FILENAME


def new_session_id() -> str:
    return str(uuid.uuid4())


class SessionLogger:
    """
    Minimal append-only session logger.

    Attributes:
        session_id: The unique identifier for the session being logged.
        path: The filesystem path to the log file.

    Log Line Format:
        <timestamp> [session=<id>] [source=<source>] <LEVEL> <message>

    Example:
        >>> logger = SessionLogger("abc-123")
        >>> logger.warn("7874", "seqno 3 ended at 50 with no open start")
        # Writes: 2024-01-15T12:00:00Z [session=abc-123] [source=7874] WARN seqno 3 ...
    """

    def __init__(self, session_id: Optional[str] = None, root: Optional[Path] = None) -> None:
        """
        Initialize a logger for a session.

        Creates the log directory if it doesn't exist, ensuring the first
        log write won't fail due to missing directories.

        Args:
            session_id: Session identifier; a new UUID when omitted.
            root: Log root override; defaults to log_root().
        """
        self.session_id = session_id or new_session_id()
        self.path = session_log_path(self.session_id, root)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _ts(self) -> str:
        """Return an ISO 8601 UTC timestamp such as 2024-01-15T12:00:00Z."""
        return (
            datetime.datetime.now(datetime.UTC)
            .isoformat(timespec="seconds")
            .replace("+00:00", "Z")
        )

    def log(self, source: str, level: str, message: str) -> None:
        """
        Write a structured log line to the session's log file.

        Args:
            source: The log source the message is about, or "jfonview"
                    for messages about the viewer itself.
            level: The log severity level ("INFO", "WARN", "ERROR").
            message: The human-readable log message.
        """
        line = (
            f"{self._ts()} "
            f"[session={self.session_id}] "
            f"[source={source}] "
            f"{level.upper()} {message}\n"
        )
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    def info(self, source: str, message: str) -> None:
        self.log(source, "INFO", message)

    def warn(self, source: str, message: str) -> None:
        self.log(source, "WARN", message)

    def error(self, source: str, message: str) -> None:
        self.log(source, "ERROR", message)
