"""
Interval matching for a single log source.

Pairs each start event with the next end event carrying the same sequence
number, producing Interval objects that the lane assigner lays out.

Purpose:
    Traced programs log a start and an end line per activity, but the two
    lines may be far apart, lost, duplicated or (after clock trouble)
    inverted. The matcher turns that stream into intervals and reports the
    irregularities instead of failing on them.

Design Decisions:
    - One matcher per source; sequence numbers are scoped to their source
    - An interval exists (open) from the moment its start is seen
    - A seqno may be reused once its previous interval has closed
"""

from typing import Dict, List

from .model import (
    Anomaly,
    AnomalyKind,
    Event,
    EventKind,
    Interval,
    MatchOutcome,
    OutcomeKind,
)


class IntervalMatcher:
    """
    Match start/end events of one source into intervals.

    Attributes:
        source_id: The source this matcher accepts events from.

    Example:
        >>> matcher = IntervalMatcher("7874")
        >>> matcher.on_event(Event(1, EventKind.START, 100, "7874")).kind
        <OutcomeKind.OPENED: 'opened'>
        >>> matcher.on_event(Event(1, EventKind.END, 200, "7874")).interval
        Interval(seqno=1, source_id='7874', start=100, end=200, inverted=False)
    """

    def __init__(self, source_id: str):
        self.source_id = source_id
        # seqno -> interval still waiting for its end event
        self._open: Dict[int, Interval] = {}
        # Every live interval of this source in creation order
        self._intervals: List[Interval] = []

    @property
    def intervals(self) -> List[Interval]:
        """All intervals of this source, open and closed."""
        return list(self._intervals)

    @property
    def open_intervals(self) -> List[Interval]:
        return list(self._open.values())

    def reset(self) -> None:
        """Forget every interval, e.g. when the source file was replaced."""
        self._open.clear()
        self._intervals.clear()

    def on_event(self, event: Event) -> MatchOutcome:
        """
        Feed one event, in the order it was appended to the source.

        Args:
            event: A parsed event belonging to this matcher's source.

        Returns:
            MatchOutcome: OPENED or CLOSED with the affected interval (and an
            anomaly for duplicate starts or inverted intervals), or ERROR with
            an orphan end anomaly.

        Raises:
            ValueError: If the event belongs to a different source.
        """
        if event.source_id != self.source_id:
            raise ValueError(
                f"event from source {event.source_id!r} fed to matcher "
                f"for {self.source_id!r}"
            )

        if event.kind is EventKind.START:
            return self._on_start(event)
        return self._on_end(event)

    def _on_start(self, event: Event) -> MatchOutcome:
        anomaly = None
        previous = self._open.pop(event.seqno, None)
        if previous is not None:
            # The earlier start is superseded, not merged
            self._intervals = [i for i in self._intervals if i is not previous]
            anomaly = Anomaly(
                kind=AnomalyKind.DUPLICATE_START,
                source_id=self.source_id,
                seqno=event.seqno,
                message=(
                    f"seqno {event.seqno} started again at {event.timestamp} "
                    f"while open since {previous.start}; earlier start discarded"
                ),
            )

        interval = Interval(
            seqno=event.seqno,
            source_id=self.source_id,
            start=event.timestamp,
        )
        self._open[event.seqno] = interval
        self._intervals.append(interval)
        return MatchOutcome(OutcomeKind.OPENED, interval=interval, anomaly=anomaly)

    def _on_end(self, event: Event) -> MatchOutcome:
        interval = self._open.pop(event.seqno, None)
        if interval is None:
            return MatchOutcome(
                OutcomeKind.ERROR,
                anomaly=Anomaly(
                    kind=AnomalyKind.ORPHAN_END,
                    source_id=self.source_id,
                    seqno=event.seqno,
                    message=(
                        f"seqno {event.seqno} ended at {event.timestamp} "
                        f"with no open start"
                    ),
                ),
            )

        interval.end = event.timestamp
        if interval.end < interval.start:
            interval.inverted = True
            return MatchOutcome(
                OutcomeKind.CLOSED,
                interval=interval,
                anomaly=Anomaly(
                    kind=AnomalyKind.INVERTED_INTERVAL,
                    source_id=self.source_id,
                    seqno=event.seqno,
                    message=(
                        f"seqno {event.seqno} ends at {interval.end} "
                        f"before its start at {interval.start}"
                    ),
                ),
            )
        return MatchOutcome(OutcomeKind.CLOSED, interval=interval)
