from pathlib import Path

import pytest

JFON_VARS = (
    "JFON_TRACE_PATH",
    "JFON_LOG_ROOT",
    "JFON_POLL_INTERVAL",
    "JFON_FILE_PATTERN",
    "JFON_MAX_ANOMALIES",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep developer settings out of the tests and logs out of the repo."""
    for name in JFON_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JFON_LOG_ROOT", str(tmp_path / "logs"))


@pytest.fixture
def write_trace(tmp_path):
    """Write (or append to) a .jfon file under tmp_path/out and return its path."""
    out = tmp_path / "out"
    out.mkdir(exist_ok=True)

    def _write(name: str, *lines: str, append: bool = False, newline: bool = True) -> Path:
        path = out / name
        text = "\n".join(lines) + ("\n" if newline and lines else "")
        with path.open("a" if append else "w", encoding="utf-8") as f:
            f.write(text)
        return path

    return _write
