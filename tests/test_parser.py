import pytest

from jfonview.timeline.errors import MalformedLineError
from jfonview.timeline.model import Event, EventKind
from jfonview.timeline.parser import U32_MAX, U64_MAX, parse_line, parse_lines


def test_parses_start_line():
    assert parse_line("seqno:7,start,1234567890123", "7874") == Event(
        seqno=7, kind=EventKind.START, timestamp=1234567890123, source_id="7874"
    )


def test_parses_end_line_with_terminator_and_whitespace():
    event = parse_line("  seqno:7,end,1234567891456\r\n", "a")
    assert event.kind is EventKind.END
    assert event.timestamp == 1234567891456


@pytest.mark.parametrize("line", [
    "garbage,data",
    "seqno:1,start",
    "seqno:1,start,100,extra",
    "seq:1,start,100",
    "seqno:-1,start,100",
    "seqno:1,start,-5",
    "seqno:1, start,100",
    "seqno:x,start,100",
    "seqno:1,start,1.5",
    "seqno:\u0661\u0662,start,100",
    "seqno:1,start,\uff11\uff10\uff10",
])
def test_rejects_malformed_shapes(line):
    with pytest.raises(MalformedLineError) as exc:
        parse_line(line, "a")
    assert exc.value.line == line.strip()


@pytest.mark.parametrize("kind", ["begin", "START", "stop", ""])
def test_kind_is_a_closed_enumeration(kind):
    with pytest.raises(MalformedLineError, match="unknown kind"):
        parse_line(f"seqno:1,{kind},100", "a")


def test_numeric_ranges():
    assert parse_line(f"seqno:{U32_MAX},start,{U64_MAX}", "a").seqno == U32_MAX
    with pytest.raises(MalformedLineError, match="u32"):
        parse_line(f"seqno:{U32_MAX + 1},start,1", "a")
    with pytest.raises(MalformedLineError, match="u64"):
        parse_line(f"seqno:1,start,{U64_MAX + 1}", "a")


def test_leading_zeros_do_not_count_against_range():
    event = parse_line("seqno:" + "0" * 30 + "7,start," + "0" * 40 + "100", "a")
    assert (event.seqno, event.timestamp) == (7, 100)


@pytest.mark.parametrize("line,reason", [
    ("seqno:" + "9" * 5000 + ",start,1", "u32"),
    ("seqno:1,end," + "9" * 5000, "u64"),
])
def test_huge_numbers_are_malformed(line, reason):
    with pytest.raises(MalformedLineError, match=reason):
        parse_line(line, "a")


def test_malformed_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_line("nope", "a")


def test_parse_lines_keeps_going_after_bad_line():
    lines = ["seqno:1,start,100", "garbage,data", "", "seqno:1,end,200"]
    parsed = list(parse_lines(lines, "a", first_line_number=10))

    assert [number for number, _ in parsed] == [10, 11, 13]
    assert isinstance(parsed[1][1], MalformedLineError)
    assert parsed[2][1] == Event(1, EventKind.END, 200, "a")
