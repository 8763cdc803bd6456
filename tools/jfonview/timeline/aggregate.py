"""
Timeline model: the aggregate view over every log source.

The model owns one IntervalMatcher per source, pools their intervals, and
lays them out on lanes shared by all sources so activity from different
traced processes can be compared side by side.

Architecture:
    refresh() is pull-based and single-threaded. Each call:
    1. Discovers new sources (if a source provider was given)
    2. Reads newly appended complete lines from every reader
    3. Parses them and feeds the events to the source's matcher
    4. Grows global_start/global_end to cover every timestamp seen
    5. Recomputes lanes over the full interval set if anything changed
"""

from collections import deque
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set

from .errors import MalformedLineError, SourceUnavailableError
from .lanes import assign_lanes, lane_count
from .matcher import IntervalMatcher
from .model import Anomaly, AnomalyKind, LanedInterval, RefreshResult, source_order
from .parser import parse_lines

NO_SOURCES_NOTICE = "No trace sources configured; awaiting live data"


class TimelineModel:
    """
    Aggregate, queryable timeline over one or more log sources.

    Readers are duck-typed: anything with a ``source_id`` and ``generation``
    attribute plus ``read_new_lines()`` and ``reset()`` methods works (see
    tui.tailer.JfonTail). A source provider is anything with ``discover()``
    returning new readers (see tui.tailer.SourceDirectory).

    Attributes:
        global_start: Smallest timestamp seen, None before the first event.
        global_end: Largest timestamp seen, None before the first event.
        anomalies: Cumulative anomaly log, capped at max_anomalies entries.

    Example:
        >>> model = TimelineModel(SourceDirectory(Path("out")))
        >>> result = model.refresh()
        >>> for laned in result.intervals:
        ...     print(laned.lane, laned.interval)
    """

    def __init__(self, sources=None, logger=None, max_anomalies: int = 1000):
        """
        Args:
            sources: Optional source provider polled for new readers on
                     every refresh.
            logger: Optional SessionLogger; every new anomaly is logged.
            max_anomalies: Size of the cumulative anomaly log.
        """
        self.sources = sources
        self.logger = logger
        self.global_start: Optional[int] = None
        self.global_end: Optional[int] = None
        self.anomalies = deque(maxlen=max_anomalies)

        self._readers: Dict[str, object] = {}
        self._matchers: Dict[str, IntervalMatcher] = {}
        # Reader generation last seen, to notice truncated files
        self._generations: Dict[str, int] = {}
        # Lines consumed so far per source, for anomaly line numbers
        self._line_counts: Dict[str, int] = {}
        # Sources currently reported unavailable (reported once per outage)
        self._unavailable: Set[str] = set()
        # Anomalies raised since the previous refresh
        self._pending: List[Anomaly] = []
        self._laned: List[LanedInterval] = []
        self._dirty = False

    # ------------------------------------------------------------
    # Source management
    # ------------------------------------------------------------

    @property
    def source_ids(self) -> List[str]:
        return sorted(self._matchers, key=source_order)

    def add_source(self, reader) -> None:
        """
        Register a reader for a new source.

        Raises:
            ValueError: If a source with the same id is already registered.
        """
        source_id = reader.source_id
        if source_id in self._readers:
            raise ValueError(f"source {source_id!r} is already registered")
        self._readers[source_id] = reader
        self._generations[source_id] = reader.generation
        self._matcher_for(source_id)
        if self.logger:
            self.logger.info(source_id, f"source added: {getattr(reader, 'path', source_id)}")

    def remove_source(self, source_id: str) -> None:
        """Drop a source together with all of its intervals."""
        self._readers.pop(source_id, None)
        self._generations.pop(source_id, None)
        self._line_counts.pop(source_id, None)
        self._unavailable.discard(source_id)
        if self._matchers.pop(source_id, None) is not None:
            self._dirty = True
            if self.logger:
                self.logger.info(source_id, "source removed")

    def _matcher_for(self, source_id: str) -> IntervalMatcher:
        matcher = self._matchers.get(source_id)
        if matcher is None:
            matcher = self._matchers[source_id] = IntervalMatcher(source_id)
        return matcher

    # ------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------

    def ingest_lines(self, source_id: str, lines: Iterable[str]) -> None:
        """
        Feed complete lines of one source, in the order they were appended.

        Lanes are not recomputed here; the next refresh() does that.
        """
        lines = list(lines)
        if not lines:
            return

        matcher = self._matcher_for(source_id)
        first = self._line_counts.get(source_id, 0) + 1
        self._line_counts[source_id] = first + len(lines) - 1

        for line_number, parsed in parse_lines(lines, source_id, first):
            if isinstance(parsed, MalformedLineError):
                self._record(Anomaly(
                    kind=AnomalyKind.MALFORMED,
                    source_id=source_id,
                    message=f"line {line_number}: {parsed.reason}: {parsed.line!r}",
                    line=parsed.line,
                    line_number=line_number,
                ))
                continue

            self._extend_bounds(parsed.timestamp)
            outcome = matcher.on_event(parsed)
            self._dirty = True
            if outcome.anomaly is not None:
                self._record(replace(outcome.anomaly, line_number=line_number))

    def _extend_bounds(self, timestamp: int) -> None:
        # Bounds only ever widen
        if self.global_start is None or timestamp < self.global_start:
            self.global_start = timestamp
        if self.global_end is None or timestamp > self.global_end:
            self.global_end = timestamp

    def _record(self, anomaly: Anomaly) -> None:
        self._pending.append(anomaly)
        self.anomalies.append(anomaly)
        if self.logger:
            if anomaly.kind is AnomalyKind.SOURCE_UNAVAILABLE:
                self.logger.error(anomaly.source_id, anomaly.message)
            else:
                self.logger.warn(anomaly.source_id, f"{anomaly.kind.value}: {anomaly.message}")

    def _poll(self, source_id: str, reader) -> None:
        try:
            lines = reader.read_new_lines()
        except SourceUnavailableError as exc:
            if source_id not in self._unavailable:
                self._unavailable.add(source_id)
                self._record(Anomaly(
                    kind=AnomalyKind.SOURCE_UNAVAILABLE,
                    source_id=source_id,
                    message=str(exc),
                ))
            return

        if source_id in self._unavailable:
            self._unavailable.discard(source_id)
            if self.logger:
                self.logger.info(source_id, "source available again")

        if reader.generation != self._generations.get(source_id):
            # The file was truncated or replaced; what we matched is gone
            self._generations[source_id] = reader.generation
            self._matcher_for(source_id).reset()
            self._line_counts[source_id] = 0
            self._dirty = True
            if self.logger:
                self.logger.info(source_id, "source truncated; re-reading from start")

        self.ingest_lines(source_id, lines)

    # ------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------

    def refresh(self) -> RefreshResult:
        """
        Pull new data from every source and return the updated timeline.

        Returns:
            RefreshResult: Laned intervals ordered by (start, seqno,
            source_id), anomalies raised since the previous call, the
            global bounds, the lane count and an optional notice.

        Note:
            Calling refresh() again with no new data returns the same
            intervals and bounds and an empty anomaly list; the cumulative
            anomaly log is left unchanged.
        """
        if self.sources is not None:
            for reader in self.sources.discover():
                self.add_source(reader)

        for source_id, reader in list(self._readers.items()):
            self._poll(source_id, reader)

        if self._dirty:
            pooled = []
            for matcher in self._matchers.values():
                # Copies keep earlier results stable when an open interval closes
                pooled.extend(replace(interval) for interval in matcher.intervals)
            self._laned = assign_lanes(pooled)
            self._dirty = False

        new_anomalies, self._pending = self._pending, []
        return RefreshResult(
            intervals=list(self._laned),
            anomalies=new_anomalies,
            global_start=self.global_start,
            global_end=self.global_end,
            lane_count=lane_count(self._laned),
            notice=self._notice(),
        )

    def reload(self) -> RefreshResult:
        """
        Forget everything and re-read every source from the beginning.

        This is the manual "reload" action. Unlike refresh(), it restarts
        global_start/global_end and clears the anomaly log.
        """
        for source_id, reader in self._readers.items():
            reader.reset()
            self._generations[source_id] = reader.generation
        for matcher in self._matchers.values():
            matcher.reset()
        # Sources fed only through ingest_lines() have nothing to re-read
        for source_id in [s for s in self._matchers if s not in self._readers]:
            del self._matchers[source_id]
        self._line_counts.clear()
        self._unavailable.clear()
        self._pending.clear()
        self.anomalies.clear()
        self.global_start = None
        self.global_end = None
        self._laned = []
        self._dirty = True
        if self.logger:
            self.logger.info("jfonview", "reload requested")
        return self.refresh()

    def _notice(self) -> Optional[str]:
        if not self._matchers:
            if self.sources is not None and hasattr(self.sources, "describe"):
                return f"No trace files in {self.sources.describe()}; awaiting live data"
            return NO_SOURCES_NOTICE
        if self._readers and self._unavailable >= set(self._readers):
            missing = ", ".join(sorted(self._unavailable))
            return f"No readable trace sources (unavailable: {missing})"
        return None
