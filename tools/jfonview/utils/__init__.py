"""
Utility modules for jfonview.

Modules:
    - paths: Filesystem path resolution (repo root, default trace directory)
    - config: .env loading and environment-driven settings
    - sessionlog: Append-only per-session log files
"""
