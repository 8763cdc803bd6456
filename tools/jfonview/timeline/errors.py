"""
Exceptions raised by the JFON pipeline.

Parse and source errors are recovered by the timeline model and turned
into anomalies; they only escape when a caller uses the parser or the
tailer directly.
"""

from pathlib import Path
from typing import Optional


class JfonError(Exception):
    """Base class for all jfonview errors."""


class MalformedLineError(JfonError, ValueError):
    """A line that is not of the shape seqno:<u32>,<start|end>,<u64>."""

    def __init__(self, line: str, reason: str = "malformed record") -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class SourceUnavailableError(JfonError):
    """A log source that cannot be read at all (missing or unreadable)."""

    def __init__(self, source_id: str, path: Path, cause: Optional[BaseException] = None) -> None:
        detail = f" ({cause})" if cause else ""
        super().__init__(f"source {source_id} unavailable: {path}{detail}")
        self.source_id = source_id
        self.path = path
        self.cause = cause


class ConfigError(JfonError, ValueError):
    """An environment setting with a value that cannot be used."""
