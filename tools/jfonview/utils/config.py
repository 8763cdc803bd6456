"""
Environment configuration for jfonview.

Settings come from environment variables, optionally seeded from a .env
file at the repository root. Command-line flags override them.

Variables:
    JFON_TRACE_PATH:    Trace file or directory to open when no path is given
    JFON_LOG_ROOT:      Root directory for session logs (see sessionlog.py)
    JFON_POLL_INTERVAL: Seconds between refreshes in live modes (default 0.25)
    JFON_FILE_PATTERN:  Glob for trace files in a directory (default *.jfon)
    JFON_MAX_ANOMALIES: Cap on the cumulative anomaly log (default 1000)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ..timeline.errors import ConfigError
from .paths import repo_root


def load_dotenv(path: Optional[Path] = None) -> None:
    """
    Load the repository-root .env file into os.environ if present.

    Side Effects:
        Modifies os.environ by adding any variables from .env that
        aren't already set (uses setdefault, so existing vars win).
    """
    env_path = path or repo_root() / ".env"

    # Silently skip if no .env file exists - it's optional
    if not env_path.exists():
        return

    with env_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue
            # Skip malformed lines (no = sign)
            if "=" not in line:
                continue
            # Split on first = only (value might contain =)
            key, value = line.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip())


def _positive(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name}={raw!r} is not a valid number") from None
    if value <= 0:
        raise ConfigError(f"{name}={raw!r} must be positive")
    return value


@dataclass(frozen=True)
class ViewerConfig:
    """
    Resolved viewer settings.

    Attributes:
        trace_path: Default trace file or directory, None for an empty timeline.
        poll_interval: Seconds between refresh() calls in live modes.
        file_pattern: Glob for discovering trace files in a directory.
        max_anomalies: Maximum anomalies kept in the model's cumulative log.
    """
    trace_path: Optional[str] = None
    poll_interval: float = 0.25
    file_pattern: str = "*.jfon"
    max_anomalies: int = 1000

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ViewerConfig":
        """
        Build a config from environment variables.

        Raises:
            ConfigError: If a numeric setting is not a positive number.
        """
        env = os.environ if env is None else env
        return cls(
            trace_path=env.get("JFON_TRACE_PATH") or None,
            poll_interval=_positive(env, "JFON_POLL_INTERVAL", cls.poll_interval, float),
            file_pattern=env.get("JFON_FILE_PATTERN") or cls.file_pattern,
            max_anomalies=_positive(env, "JFON_MAX_ANOMALIES", cls.max_anomalies, int),
        )
