"""SQLite repositories for core entities."""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Protocol


class Repository(Protocol):
    """Data access interface the services depend on."""

    def list(self) -> list[dict[str, Any]]: ...

    def get(self, entity_id: int) -> dict[str, Any] | None: ...

    def create(self, data: dict[str, Any]) -> int: ...

    def update(self, entity_id: int, data: dict[str, Any]) -> None: ...

    def delete(self, entity_id: int) -> bool: ...


def _row_to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    if row is None:
        return None
    return dict(row)


def _bool_to_int(value: object) -> int:
    return 1 if value else 0


class PlayerRepository:
    """Repository for player data access."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, data: dict[str, Any]) -> int:
        cursor = self._connection.execute(
            """
            INSERT INTO players (
                name,
                alias,
                phone,
                affiliation_number,
                selected,
                role,
                invited_by
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data.get("name"),
                data.get("alias"),
                data.get("phone"),
                data.get("affiliation_number"),
                _bool_to_int(data.get("selected")),
                data.get("role") or "player",
                data.get("invited_by"),
            ),
        )
        self._connection.commit()
        return int(cursor.lastrowid)

    def get(self, player_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM players WHERE id = ?", (player_id,)
        ).fetchone()
        return _row_to_dict(row)

    def update(self, player_id: int, data: dict[str, Any]) -> None:
        self._connection.execute(
            """
            UPDATE players
            SET name = ?,
                alias = ?,
                phone = ?,
                affiliation_number = ?,
                selected = ?,
                role = ?,
                invited_by = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (
                data.get("name"),
                data.get("alias"),
                data.get("phone"),
                data.get("affiliation_number"),
                _bool_to_int(data.get("selected")),
                data.get("role") or "player",
                data.get("invited_by"),
                player_id,
            ),
        )
        self._connection.commit()

    def delete(self, player_id: int) -> bool:
        cursor = self._connection.execute("DELETE FROM players WHERE id = ?", (player_id,))
        self._connection.commit()
        return cursor.rowcount > 0

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute("SELECT * FROM players ORDER BY id").fetchall()
        return [dict(row) for row in rows]

    def list_selected(self) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            "SELECT * FROM players WHERE selected = 1 ORDER BY id"
        ).fetchall()
        return [dict(row) for row in rows]

    def set_selected(self, player_id: int, selected: bool) -> None:
        self._connection.execute(
            "UPDATE players SET selected = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (_bool_to_int(selected), player_id),
        )
        self._connection.commit()

    def find_by_phone(self, phone: str) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM players WHERE phone = ? ORDER BY id LIMIT 1", (phone,)
        ).fetchone()
        return _row_to_dict(row)

    def find_by_name(self, name: str) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM players WHERE name = ? ORDER BY id LIMIT 1", (name,)
        ).fetchone()
        return _row_to_dict(row)


class CourtRepository:
    """Repository for court data access."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, data: dict[str, Any]) -> int:
        cursor = self._connection.execute(
            "INSERT INTO courts (name) VALUES (?)", (data.get("name"),)
        )
        self._connection.commit()
        return int(cursor.lastrowid)

    def get(self, court_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM courts WHERE id = ?", (court_id,)
        ).fetchone()
        return _row_to_dict(row)

    def update(self, court_id: int, data: dict[str, Any]) -> None:
        self._connection.execute(
            "UPDATE courts SET name = ? WHERE id = ?", (data.get("name"), court_id)
        )
        self._connection.commit()

    def delete(self, court_id: int) -> bool:
        cursor = self._connection.execute("DELETE FROM courts WHERE id = ?", (court_id,))
        self._connection.commit()
        return cursor.rowcount > 0

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute("SELECT * FROM courts ORDER BY id").fetchall()
        return [dict(row) for row in rows]


class MatchResultRepository:
    """Repository for recorded set results."""

    _COLUMNS = (
        "pairing_id",
        "game_date",
        "set_number",
        "pair1_score",
        "pair2_score",
        "winner",
        "completed",
        "pair1_player1_id",
        "pair1_player2_id",
        "pair2_player1_id",
        "pair2_player2_id",
        "court_id",
        "court_name",
    )

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def _values(self, data: dict[str, Any]) -> list[Any]:
        values = [data.get(column) for column in self._COLUMNS]
        values[self._COLUMNS.index("completed")] = _bool_to_int(data.get("completed"))
        return values

    def create(self, data: dict[str, Any]) -> int:
        columns_sql = ", ".join(self._COLUMNS)
        placeholders = ", ".join("?" for _ in self._COLUMNS)
        cursor = self._connection.execute(
            f"INSERT INTO match_results ({columns_sql}) VALUES ({placeholders})",
            self._values(data),
        )
        self._connection.commit()
        return int(cursor.lastrowid)

    def get(self, result_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM match_results WHERE id = ?", (result_id,)
        ).fetchone()
        return _row_to_dict(row)

    def update(self, result_id: int, data: dict[str, Any]) -> None:
        assignments = ",\n                ".join(f"{column} = ?" for column in self._COLUMNS)
        self._connection.execute(
            f"""
            UPDATE match_results
            SET {assignments}
            WHERE id = ?
            """,
            [*self._values(data), result_id],
        )
        self._connection.commit()

    def delete(self, result_id: int) -> bool:
        cursor = self._connection.execute(
            "DELETE FROM match_results WHERE id = ?", (result_id,)
        )
        self._connection.commit()
        return cursor.rowcount > 0

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            "SELECT * FROM match_results ORDER BY id"
        ).fetchall()
        return [dict(row) for row in rows]

    def search(
        self, *, game_date: str | None = None, pairing_id: int | None = None
    ) -> list[dict[str, Any]]:
        clauses = []
        params: list[Any] = []
        if game_date is not None:
            clauses.append("game_date = ?")
            params.append(game_date)
        if pairing_id is not None:
            clauses.append("pairing_id = ?")
            params.append(pairing_id)

        where_sql = ""
        if clauses:
            where_sql = "WHERE " + " AND ".join(clauses)

        rows = self._connection.execute(
            f"SELECT * FROM match_results {where_sql} ORDER BY id",
            params,
        ).fetchall()
        return [dict(row) for row in rows]

    def count_for_player(self, player_id: int) -> int:
        row = self._connection.execute(
            """
            SELECT COUNT(*)
            FROM match_results
            WHERE pair1_player1_id = ?
               OR pair1_player2_id = ?
               OR pair2_player1_id = ?
               OR pair2_player2_id = ?
            """,
            (player_id, player_id, player_id, player_id),
        ).fetchone()
        return int(row[0]) if row else 0

    def max_set_number(self, pairing_id: int) -> int:
        row = self._connection.execute(
            "SELECT MAX(set_number) FROM match_results WHERE pairing_id = ?",
            (pairing_id,),
        ).fetchone()
        return int(row[0]) if row and row[0] is not None else 0


class GameRepository:
    """Repository for scheduled game days."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    @staticmethod
    def _decode(row: sqlite3.Row | None) -> dict[str, Any] | None:
        data = _row_to_dict(row)
        if data is None:
            return None
        for key in ("court_ids", "player_ids"):
            try:
                decoded = json.loads(data.get(key) or "[]")
            except json.JSONDecodeError:
                decoded = []
            data[key] = [int(item) for item in decoded] if isinstance(decoded, list) else []
        return data

    def create(self, data: dict[str, Any]) -> int:
        cursor = self._connection.execute(
            """
            INSERT INTO games (
                game_date,
                court_ids,
                status,
                max_players,
                player_ids,
                sets_per_match,
                description
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data.get("game_date"),
                json.dumps(list(data.get("court_ids") or [])),
                data.get("status") or "pending",
                data.get("max_players"),
                json.dumps(list(data.get("player_ids") or [])),
                data.get("sets_per_match") or 3,
                data.get("description"),
            ),
        )
        self._connection.commit()
        return int(cursor.lastrowid)

    def get(self, game_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM games WHERE id = ?", (game_id,)
        ).fetchone()
        return self._decode(row)

    def update(self, game_id: int, data: dict[str, Any]) -> None:
        self._connection.execute(
            """
            UPDATE games
            SET game_date = ?,
                court_ids = ?,
                status = ?,
                max_players = ?,
                player_ids = ?,
                sets_per_match = ?,
                description = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (
                data.get("game_date"),
                json.dumps(list(data.get("court_ids") or [])),
                data.get("status") or "pending",
                data.get("max_players"),
                json.dumps(list(data.get("player_ids") or [])),
                data.get("sets_per_match") or 3,
                data.get("description"),
                game_id,
            ),
        )
        self._connection.commit()

    def delete(self, game_id: int) -> bool:
        cursor = self._connection.execute("DELETE FROM games WHERE id = ?", (game_id,))
        self._connection.commit()
        return cursor.rowcount > 0

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            "SELECT * FROM games ORDER BY game_date DESC, id DESC"
        ).fetchall()
        return [self._decode(row) for row in rows]


class WaitListRepository:
    """Repository for per-game wait lists, kept in arrival order."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def add(self, game_id: int, player_id: int) -> bool:
        cursor = self._connection.execute(
            "INSERT OR IGNORE INTO wait_list (game_id, player_id) VALUES (?, ?)",
            (game_id, player_id),
        )
        self._connection.commit()
        return cursor.rowcount > 0

    def remove(self, game_id: int, player_id: int) -> bool:
        cursor = self._connection.execute(
            "DELETE FROM wait_list WHERE game_id = ? AND player_id = ?",
            (game_id, player_id),
        )
        self._connection.commit()
        return cursor.rowcount > 0

    def contains(self, game_id: int, player_id: int) -> bool:
        row = self._connection.execute(
            "SELECT 1 FROM wait_list WHERE game_id = ? AND player_id = ?",
            (game_id, player_id),
        ).fetchone()
        return row is not None

    def list_for_game(self, game_id: int) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            """
            SELECT players.*
            FROM wait_list
            JOIN players ON players.id = wait_list.player_id
            WHERE wait_list.game_id = ?
            ORDER BY wait_list.id
            """,
            (game_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def clear(self, game_id: int) -> None:
        self._connection.execute("DELETE FROM wait_list WHERE game_id = ?", (game_id,))
        self._connection.commit()
