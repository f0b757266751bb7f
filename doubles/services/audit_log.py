from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from doubles.db.database import get_connection

logger = logging.getLogger(__name__)

GENERATE_PAIRINGS = "GENERATE_PAIRINGS"
RECORD_RESULT = "RECORD_RESULT"
UPDATE_RESULT = "UPDATE_RESULT"
RECALC_RANKINGS = "RECALC_RANKINGS"
WAIT_LIST = "WAIT_LIST"
ROSTER = "ROSTER"
EXPORT_FILE = "EXPORT_FILE"
ERROR = "ERROR"

EVENT_TYPES = [
    GENERATE_PAIRINGS,
    RECORD_RESULT,
    UPDATE_RESULT,
    RECALC_RANKINGS,
    WAIT_LIST,
    ROSTER,
    EXPORT_FILE,
    ERROR,
]


@dataclass(frozen=True)
class AuditEvent:
    id: int
    event_type: str
    title: str
    details: str
    level: str
    context: dict[str, object]
    created_at: str

    def format_line(self) -> str:
        line = f"[{self.created_at}] {self.level.upper()} {self.event_type} | {self.title} | {self.details}"
        if self.context:
            line += " | " + json.dumps(self.context, ensure_ascii=False, sort_keys=True)
        return line


class AuditLogService:
    def __init__(self, connection: sqlite3.Connection | None = None) -> None:
        self._connection = connection or get_connection()

    def log_event(
        self,
        event_type: str,
        title: str,
        details: str,
        level: str = "info",
        context: dict[str, object] | None = None,
    ) -> int:
        context_json = json.dumps(context or {}, ensure_ascii=False)
        with self._connection:
            cursor = self._connection.execute(
                """
                INSERT INTO audit_log (event_type, title, details, level, context_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (event_type, title, details, level, context_json),
            )
        return int(cursor.lastrowid)

    def log_error(
        self,
        title: str,
        error: Exception,
        context: dict[str, object] | None = None,
    ) -> int:
        payload = dict(context or {})
        payload["error_type"] = type(error).__name__
        code = getattr(error, "code", None)
        if code:
            payload["code"] = code
        logger.error("%s: %s", title, error)
        return self.log_event(ERROR, title, str(error), level="error", context=payload)

    def list_events(
        self,
        event_type: str | None = None,
        query: str = "",
        *,
        level: str | None = None,
        limit: int | None = None,
    ) -> list[AuditEvent]:
        """Return matching events, newest first."""
        filters = {"event_type = ?": event_type, "level = ?": level}
        clauses = [clause for clause, value in filters.items() if value]
        params: list[object] = [value for value in filters.values() if value]

        needle = query.strip()
        if needle:
            clauses.append("(title LIKE ? OR details LIKE ?)")
            params += [f"%{needle}%"] * 2

        sql = "SELECT * FROM audit_log"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return [self._row_to_event(row) for row in self._connection.execute(sql, params)]

    def export_txt(self, path: str | Path, event_type: str | None = None, query: str = "") -> Path:
        output_path = Path(path)
        output_path.write_text(
            "\n".join(event.format_line() for event in self.list_events(event_type, query)),
            encoding="utf-8",
        )
        return output_path

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> AuditEvent:
        try:
            context = json.loads(row["context_json"] or "{}")
        except json.JSONDecodeError:
            context = {}

        return AuditEvent(
            id=int(row["id"]),
            event_type=str(row["event_type"]),
            title=str(row["title"]),
            details=str(row["details"] or ""),
            level=str(row["level"] or "info"),
            context=context if isinstance(context, dict) else {},
            created_at=str(row["created_at"]),
        )
