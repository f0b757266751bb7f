"""Database schema definitions."""

from __future__ import annotations

import sqlite3

PLAYER_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS players (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    alias TEXT,
    phone TEXT,
    affiliation_number TEXT,
    selected INTEGER NOT NULL DEFAULT 0,
    role TEXT NOT NULL DEFAULT 'player',
    invited_by INTEGER,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (role IN ('player', 'admin', 'superadmin'))
);
"""

PLAYER_INDEXES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_players_name ON players (name);",
    "CREATE INDEX IF NOT EXISTS idx_players_phone ON players (phone);",
]

COURT_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS courts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);
"""

GAME_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_date TEXT NOT NULL,
    court_ids TEXT NOT NULL DEFAULT '[]',
    status TEXT NOT NULL DEFAULT 'pending',
    max_players INTEGER,
    player_ids TEXT NOT NULL DEFAULT '[]',
    sets_per_match INTEGER NOT NULL DEFAULT 3,
    description TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (status IN ('pending', 'in_progress', 'completed')),
    CHECK (sets_per_match >= 1)
);
"""

WAIT_LIST_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS wait_list (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id INTEGER NOT NULL,
    player_id INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (game_id, player_id),
    FOREIGN KEY (game_id) REFERENCES games(id) ON DELETE CASCADE,
    FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE CASCADE
);
"""

# Player columns carry no foreign keys: results keep their history even if a
# referenced player row is gone.
MATCH_RESULT_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS match_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    pairing_id INTEGER NOT NULL,
    game_date TEXT NOT NULL,
    set_number INTEGER NOT NULL,
    pair1_score INTEGER NOT NULL,
    pair2_score INTEGER NOT NULL,
    winner TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    pair1_player1_id INTEGER NOT NULL,
    pair1_player2_id INTEGER NOT NULL,
    pair2_player1_id INTEGER NOT NULL,
    pair2_player2_id INTEGER NOT NULL,
    court_id INTEGER NOT NULL,
    court_name TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (set_number >= 1),
    CHECK (pair1_score >= 0 AND pair2_score >= 0),
    CHECK (winner IN ('pair1', 'pair2'))
);
"""

MATCH_RESULT_INDEXES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_match_results_date ON match_results (game_date);",
    "CREATE INDEX IF NOT EXISTS idx_match_results_pairing ON match_results (pairing_id, set_number);",
]

AUDIT_LOG_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type TEXT NOT NULL,
    title TEXT NOT NULL,
    details TEXT,
    level TEXT NOT NULL DEFAULT 'info',
    context_json TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


SCHEMA_SQL = [
    PLAYER_TABLE_SQL,
    COURT_TABLE_SQL,
    GAME_TABLE_SQL,
    WAIT_LIST_TABLE_SQL,
    MATCH_RESULT_TABLE_SQL,
    AUDIT_LOG_TABLE_SQL,
    *PLAYER_INDEXES_SQL,
    *MATCH_RESULT_INDEXES_SQL,
]


def initialize_schema(connection: sqlite3.Connection) -> None:
    """Initialize database schema if needed."""
    with connection:
        for statement in SCHEMA_SQL:
            connection.execute(statement)
