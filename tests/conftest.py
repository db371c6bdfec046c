"""
Pytest configuration and shared fixtures.

Provides temporary SQLite databases, connection descriptors and a config
directory for settings tests.
"""

import sqlite3
from pathlib import Path

import pytest

from sqldash.db.models import ConnectionDescriptor, ConnectionType, QueryResult


# ==============================================================================
# Database Fixtures
# ==============================================================================


@pytest.fixture
def sqlite_path(tmp_path) -> Path:
    """
    Provide a SQLite file with a small ``sales`` table.

    Rows:
    - (1, '2026-01-27 00:17:27', 'north', 10.5, NULL)
    - (2, '2026-01-28 09:00:00', 'south', 20.0, 'late')
    """
    path = tmp_path / "sales.db"
    con = sqlite3.connect(path)
    try:
        con.executescript(
            """
            CREATE TABLE sales (id INTEGER PRIMARY KEY, day TEXT, region TEXT, amount REAL, note TEXT);
            INSERT INTO sales VALUES (1, '2026-01-27 00:17:27', 'north', 10.5, NULL);
            INSERT INTO sales VALUES (2, '2026-01-28 09:00:00', 'south', 20.0, 'late');
            """
        )
        con.commit()
    finally:
        con.close()
    return path


@pytest.fixture
def sqlite_conn(sqlite_path) -> ConnectionDescriptor:
    return ConnectionDescriptor(type=ConnectionType.SQLITE, database=str(sqlite_path), id="local", name="Local")


@pytest.fixture
def pg_conn() -> ConnectionDescriptor:
    return ConnectionDescriptor(
        type=ConnectionType.POSTGRESQL,
        host="db.example.com",
        port=5432,
        database="analytics",
        username="reader",
        password="s3cret",
    )


@pytest.fixture
def mysql_conn() -> ConnectionDescriptor:
    return ConnectionDescriptor(
        type=ConnectionType.MYSQL,
        host="mysql.example.com",
        port=3306,
        database="shop",
        username="reader",
        password="s3cret",
    )


# ==============================================================================
# Result Fixtures
# ==============================================================================


@pytest.fixture
def series_result() -> QueryResult:
    return QueryResult(
        columns=["d", "n"],
        rows=[
            {"d": "2026-01-27 00:17:27", "n": 5},
            {"d": "2026-01-28T10:00:00", "n": 7},
        ],
        row_count=2,
    )


# ==============================================================================
# Config Fixtures
# ==============================================================================


@pytest.fixture
def config_dir(tmp_path, monkeypatch) -> Path:
    """Provide a config directory holding ``test.yaml`` with APP_ENV=test."""
    for key in (
        "LOG_LEVEL", "LOG_FILE", "DATA_DIR", "PROBE_TIMEOUT_MS", "CHART_THEME", "CHART_COLORS",
        "CHART_LEGEND_POSITION", "STAT_THOUSANDS_SEPARATOR", "STAT_DECIMAL_SEPARATOR",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("APP_ENV", "test")

    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "test.yaml").write_text(
        """
app:
  log_level: DEBUG
  log_file: logs/test.log
store:
  data_dir: /tmp/sqldash-data
query:
  probe_timeout_ms: 2500
charts:
  theme: dark
  legend_position: right
  colors: ["#111111", "#222222"]
  stat:
    thousands_separator: "."
    decimal_separator: ","
""",
        encoding="utf-8",
    )
    return cfg
