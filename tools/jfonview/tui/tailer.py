"""
Real-time file tailing for JFON trace files.

This module provides the log source readers that feed the timeline model.
Traced programs append one line per event to ``out/<pid>.jfon`` while they
run; the classes here poll those files and hand back new complete lines.

Design Decisions:
    - Uses polling rather than inotify for cross-platform simplicity
    - Buffers partial lines until their newline has been written
    - Treats a file that shrank as a replaced source (truncation)
    - Discovers new trace files in a directory on every tick
    - Never parses; parsing belongs to the timeline package
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

from ..timeline.errors import SourceUnavailableError

DEFAULT_PATTERN = "*.jfon"


def source_id_for(path: Path) -> str:
    """
    Derive a source identifier from a trace file path.

    The producer names files after the traced process id, so the stem is
    the natural identity: ``out/7874.jfon`` -> ``"7874"``.
    """
    return path.stem


class JfonTail:
    """
    Tail a single JFON file and return newly appended complete lines.

    Tracks the file offset and polls for new content. Handles the common
    edge cases: file not created yet, truncation, partial lines and
    invalid UTF-8.

    Attributes:
        path: Path to the trace file being tailed.
        source_id: Identifier attached to every event parsed from this file.
        offset: Current read position in the file, in bytes.
        partial: Incomplete trailing line held back until its newline arrives.
        inode: Inode of the file as last seen, None before the first read.
        generation: Bumped each time the file is found truncated or replaced.
                    Consumers compare it to detect that earlier lines are gone.

    Example:
        >>> tail = JfonTail(Path("out/7874.jfon"))
        >>> lines = tail.read_new_lines()  # New complete lines since last call
    """

    def __init__(self, path: Path, source_id: Optional[str] = None):
        self.path = Path(path)
        self.source_id = source_id or source_id_for(self.path)
        # Track where we left off reading in the file
        self.offset = 0
        # Bytes of an incomplete line, kept undecoded so a multi-byte
        # character split across writes is decoded whole
        self.partial = b""
        self.generation = 0
        # Inode of the file last read, so a replacement is noticed even
        # when the new file is at least as long as our offset
        self.inode: Optional[int] = None

    def reset(self) -> None:
        """Start over from the beginning of the file on the next read."""
        self.offset = 0
        self.partial = b""

    def read_new_lines(self) -> List[str]:
        """
        Read new complete lines from the file since the last call.

        Returns:
            List[str]: Complete lines without their terminators, in file
                       order. Empty if nothing new was appended.

        Raises:
            SourceUnavailableError: If the file does not exist or cannot
                be read. The tail keeps its position, so reading resumes
                where it stopped once the file is back.
        """
        try:
            stat = self.path.stat()
        except OSError as exc:
            raise SourceUnavailableError(self.source_id, self.path, exc) from exc

        size = stat.st_size
        replaced = self.inode is not None and stat.st_ino != self.inode
        self.inode = stat.st_ino

        # Detect file truncation or replacement (new run of the traced program)
        if replaced or size < self.offset:
            self.reset()
            self.generation += 1

        # No new content since last poll
        if size == self.offset:
            return []

        try:
            with self.path.open("rb") as f:
                f.seek(self.offset)
                data = f.read(size - self.offset)
        except OSError as exc:
            raise SourceUnavailableError(self.source_id, self.path, exc) from exc
        self.offset += len(data)

        # Prepend any buffered partial line from the last poll
        data = self.partial + data
        chunks = data.split(b"\n")
        # The last chunk is empty when the data ends with a newline,
        # otherwise it is an incomplete line to hold back
        self.partial = chunks.pop()

        return [chunk.decode("utf-8", errors="replace") for chunk in chunks]


class SourceDirectory:
    """
    Discover the trace files behind one CLI path.

    The path may name a single ``.jfon`` file or a directory of them. For a
    directory, new files are picked up on every discover() call so traced
    processes that start after the viewer still show up.

    Attributes:
        path: The file or directory being watched.
        pattern: Glob used to find trace files in a directory.
        tails: Dict mapping source ids to their JfonTail instances.

    Example:
        >>> sources = SourceDirectory(Path("out"))
        >>> for tail in sources.discover():
        ...     model.add_source(tail)
    """

    def __init__(self, path: Path, pattern: str = DEFAULT_PATTERN):
        self.path = Path(path)
        self.pattern = pattern
        self.tails: Dict[str, JfonTail] = {}

    @property
    def is_single_file(self) -> bool:
        """True when the path names one trace file rather than a directory."""
        if self.path.is_dir():
            return False
        # A missing path counts as a file if it looks like one; the producer
        # may simply not have created it yet
        return self.path.is_file() or self.path.match(self.pattern)

    def discover(self) -> List[JfonTail]:
        """
        Return tails for trace files not seen by earlier calls.

        Side Effects:
            Records the new tails in self.tails.
        """
        if self.is_single_file:
            candidates = [self.path]
        elif self.path.is_dir():
            candidates = sorted(self.path.glob(self.pattern))
        else:
            candidates = []

        new_tails = []
        for path in candidates:
            source_id = source_id_for(path)
            # Only create a tail if we haven't seen this source before
            if source_id in self.tails:
                continue
            tail = JfonTail(path, source_id)
            self.tails[source_id] = tail
            new_tails.append(tail)

        return new_tails

    def describe(self) -> str:
        kind = "file" if self.is_single_file else "directory"
        return f"{kind} {os.fspath(self.path)}"
