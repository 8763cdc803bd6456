from jfonview.timeline.aggregate import TimelineModel
from jfonview.tui.views import describe_interval, render_rows, summary_line


def refreshed(*lines):
    model = TimelineModel()
    model.ingest_lines("7874", lines)
    return model.refresh()


def test_rows_scale_time_onto_columns():
    result = refreshed(
        "seqno:1,start,100", "seqno:1,end,200",
        "seqno:2,start,150", "seqno:2,end,180",
    )

    # 26 wide: 6 label characters and 20 time columns over a span of 100
    assert render_rows(result, 26) == [
        "  0 | [1=================]",
        "  1 | " + " " * 9 + "[2====]",
    ]


def test_open_interval_runs_to_global_end():
    result = refreshed("seqno:1,start,100", "seqno:2,start,150", "seqno:2,end,200")
    rows = render_rows(result, 26)

    assert rows[0] == "  0 | [1=================>"
    assert rows[1].startswith("  1 | ")


def test_single_point_open_interval():
    assert render_rows(refreshed("seqno:1,start,100"), 26) == ["  0 | >"]


def test_inverted_interval_drawn_as_marker():
    rows = render_rows(refreshed("seqno:1,start,500", "seqno:1,end,400"), 26)
    assert rows == ["  0 | " + " " * 19 + "!"]


def test_lane_window():
    result = refreshed(*[f"seqno:{n},start,{n}" for n in range(5)])
    rows = render_rows(result, 30, first_lane=2, max_lanes=2)
    assert [row[:5] for row in rows] == ["  2 |", "  3 |"]


def test_empty_timeline_has_no_rows():
    assert render_rows(TimelineModel().refresh(), 80) == []


def test_describe_interval_uses_relative_times():
    result = refreshed("seqno:1,start,100", "seqno:1,end,130", "seqno:2,start,120")
    lines = [describe_interval(li, result.global_start) for li in result.intervals]

    assert lines[0] == "lane   0  source 7874     seqno      1  +0 .. +30 (30)"
    assert lines[1] == "lane   1  source 7874     seqno      2  +20 .. open"


def test_summary_line():
    result = refreshed("seqno:1,start,100", "seqno:1,end,130", "seqno:2,start,120")
    assert summary_line(result) == "lanes=2 intervals=2 open=1 span=30"
    assert summary_line(TimelineModel().refresh()) == "lanes=0 intervals=0 open=0 span=-"
