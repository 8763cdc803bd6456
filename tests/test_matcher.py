import pytest

from jfonview.timeline.matcher import IntervalMatcher
from jfonview.timeline.model import AnomalyKind, Event, EventKind, Interval, OutcomeKind


def start(seqno, ts, source="p1"):
    return Event(seqno, EventKind.START, ts, source)


def end(seqno, ts, source="p1"):
    return Event(seqno, EventKind.END, ts, source)


@pytest.fixture
def matcher():
    return IntervalMatcher("p1")


def test_start_opens_interval_immediately(matcher):
    outcome = matcher.on_event(start(1, 100))

    assert outcome.kind is OutcomeKind.OPENED
    assert outcome.anomaly is None
    assert outcome.interval == Interval(1, "p1", 100, None)
    assert outcome.interval.is_open
    assert matcher.open_intervals == [outcome.interval]


def test_end_closes_matching_interval(matcher):
    matcher.on_event(start(1, 100))
    outcome = matcher.on_event(end(1, 200))

    assert outcome.kind is OutcomeKind.CLOSED
    assert outcome.anomaly is None
    assert outcome.interval.end == 200
    assert outcome.interval.duration() == 100
    assert matcher.open_intervals == []
    assert matcher.intervals == [Interval(1, "p1", 100, 200)]


def test_interleaved_pairs_match_by_seqno(matcher):
    for event in [start(1, 100), start(2, 150), end(2, 180), end(1, 200)]:
        matcher.on_event(event)

    assert matcher.intervals == [Interval(1, "p1", 100, 200), Interval(2, "p1", 150, 180)]


def test_duplicate_start_supersedes_earlier_interval(matcher):
    first = matcher.on_event(start(1, 100)).interval
    outcome = matcher.on_event(start(1, 150))

    assert outcome.kind is OutcomeKind.OPENED
    assert outcome.anomaly.kind is AnomalyKind.DUPLICATE_START
    assert outcome.anomaly.seqno == 1
    assert outcome.interval is not first
    assert matcher.intervals == [Interval(1, "p1", 150, None)]

    matcher.on_event(end(1, 300))
    assert matcher.intervals == [Interval(1, "p1", 150, 300)]


def test_orphan_end_creates_nothing(matcher):
    outcome = matcher.on_event(end(1, 50))

    assert outcome.kind is OutcomeKind.ERROR
    assert outcome.interval is None
    assert outcome.anomaly.kind is AnomalyKind.ORPHAN_END
    assert matcher.intervals == []


def test_second_end_for_same_seqno_is_orphan(matcher):
    matcher.on_event(start(1, 100))
    matcher.on_event(end(1, 200))

    assert matcher.on_event(end(1, 250)).anomaly.kind is AnomalyKind.ORPHAN_END
    assert matcher.intervals == [Interval(1, "p1", 100, 200)]


def test_inverted_interval_is_closed_and_flagged(matcher):
    matcher.on_event(start(1, 500))
    outcome = matcher.on_event(end(1, 400))

    assert outcome.kind is OutcomeKind.CLOSED
    assert outcome.anomaly.kind is AnomalyKind.INVERTED_INTERVAL
    # Bounds are reported as seen, not swapped
    assert (outcome.interval.start, outcome.interval.end) == (500, 400)
    assert outcome.interval.inverted
    assert not outcome.interval.is_open


def test_seqno_can_be_reused_after_close(matcher):
    for event in [start(1, 100), end(1, 200), start(1, 300), end(1, 400)]:
        assert matcher.on_event(event).anomaly is None

    assert [(i.start, i.end) for i in matcher.intervals] == [(100, 200), (300, 400)]


def test_rejects_events_from_other_sources(matcher):
    with pytest.raises(ValueError):
        matcher.on_event(start(1, 100, source="p2"))


def test_reset_forgets_open_and_closed(matcher):
    matcher.on_event(start(1, 100))
    matcher.on_event(start(2, 100))
    matcher.on_event(end(2, 150))
    matcher.reset()

    assert matcher.intervals == []
    assert matcher.on_event(end(1, 200)).kind is OutcomeKind.ERROR
