"""
Trace source discovery for the CLI.

Lists the .jfon files behind a path so a developer can see which traced
processes have written data, how much and how recently, before opening
the viewer.
"""

from pathlib import Path
from typing import Dict, List

from .tailer import DEFAULT_PATTERN, SourceDirectory, source_id_for


def discover_sources(path: Path, pattern: str = DEFAULT_PATTERN) -> List[Dict]:
    """
    Scan a trace file or directory and describe every trace file found.

    Returns:
        List[Dict]: Sorted by most recently modified first. Each dictionary
                    contains:
                    - source_id (str): Identifier the viewer will use
                    - path (Path): The trace file
                    - size (int): File size in bytes
                    - last_mtime (float): Modification time

    Note:
        - A single missing file yields an empty list
        - Returns empty list if the directory doesn't exist
    """
    directory = SourceDirectory(path, pattern)
    if directory.is_single_file:
        candidates = [directory.path] if directory.path.is_file() else []
    elif directory.path.is_dir():
        candidates = [p for p in directory.path.glob(pattern) if p.is_file()]
    else:
        candidates = []

    sources = []
    for trace in candidates:
        stat = trace.stat()
        sources.append({
            "source_id": source_id_for(trace),
            "path": trace,
            "size": stat.st_size,
            "last_mtime": stat.st_mtime,
        })

    # Active processes first
    sources.sort(key=lambda s: s["last_mtime"], reverse=True)
    return sources
