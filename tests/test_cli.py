import pytest

from jfonview import cli


def run(*argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(list(argv))
    return exc.value.code


def test_dump_prints_lanes_and_intervals(write_trace, capsys):
    path = write_trace(
        "7874.jfon",
        "seqno:1,start,100", "seqno:1,end,200",
        "seqno:2,start,150", "seqno:2,end,180",
    )

    assert run("--no-log", "dump", str(path), "--width", "26") == 0

    out = capsys.readouterr().out
    assert out.splitlines()[0] == "lanes=2 intervals=2 open=0 span=100"
    assert "  0 | [1=================]" in out
    assert "lane   1  source 7874     seqno      2  +50 .. +80 (30)" in out


def test_dump_lists_anomalies_on_request(write_trace, capsys):
    path = write_trace("1.jfon", "seqno:1,start,100", "garbage,data", "seqno:4,end,120")

    assert run("--no-log", "dump", str(path), "--anomalies") == 0

    out = capsys.readouterr().out
    assert "Anomalies (2):" in out
    assert "malformed" in out
    assert "orphan_end" in out


def test_dump_directory_merges_sources(write_trace, capsys):
    write_trace("1.jfon", "seqno:1,start,100", "seqno:1,end,200")
    directory = write_trace("2.jfon", "seqno:1,start,100", "seqno:1,end,200").parent

    assert run("--no-log", "dump", str(directory)) == 0
    assert capsys.readouterr().out.startswith("lanes=2 intervals=2")


def test_dump_without_path_awaits_live_data(capsys):
    assert run("--no-log", "dump") == 0
    assert "awaiting live data" in capsys.readouterr().out


def test_dump_uses_configured_trace_path(write_trace, monkeypatch, capsys):
    path = write_trace("1.jfon", "seqno:1,start,100")
    monkeypatch.setenv("JFON_TRACE_PATH", str(path))

    assert run("--no-log", "dump") == 0
    assert capsys.readouterr().out.startswith("lanes=1 intervals=1 open=1")


def test_dump_unreadable_source_fails(tmp_path, capsys):
    assert run("--no-log", "dump", str(tmp_path / "missing.jfon")) == 1
    assert "No readable trace sources" in capsys.readouterr().out


def test_dump_writes_session_log(write_trace, tmp_path, capsys):
    path = write_trace("1.jfon", "seqno:2,end,5")

    assert run("dump", str(path)) == 0

    logs = list((tmp_path / "logs" / "sessions").glob("*/jfonview.log"))
    assert len(logs) == 1
    text = logs[0].read_text(encoding="utf-8")
    assert "INFO session started: file" in text
    assert "[source=1] WARN orphan_end" in text


def test_sources_lists_files(write_trace, capsys):
    directory = write_trace("7874.jfon", "seqno:1,start,1").parent

    assert run("sources", str(directory)) == 0

    out = capsys.readouterr().out
    assert f"[jfonview] Sources in {directory}" in out
    assert "7874" in out


def test_sources_requires_a_path(capsys):
    assert run("sources") == 1


def test_bad_config_exits_with_2(monkeypatch, capsys):
    monkeypatch.setenv("JFON_POLL_INTERVAL", "often")

    assert run("--no-log", "dump") == 2
    assert "configuration error" in capsys.readouterr().err


def test_command_is_required(capsys):
    assert run() == 2
