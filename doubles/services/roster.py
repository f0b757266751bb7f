from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable

from doubles.db.repositories import CourtRepository, MatchResultRepository, PlayerRepository
from doubles.domain.models import ROLE_PLAYER, ROLES, Court, Player
from doubles.errors import CourtNameError, NotFoundError, PlayerInUseError
from doubles.services.audit_log import ROSTER, AuditLogService
from doubles.settings import get_allowed_court_names

logger = logging.getLogger(__name__)

_PLAYER_FIELDS = ("name", "alias", "phone", "affiliation_number", "selected", "role", "invited_by")


class RosterService:
    """Players and courts available for scheduling."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        allowed_court_names: Iterable[str] | None = None,
    ) -> None:
        self._player_repo = PlayerRepository(connection)
        self._court_repo = CourtRepository(connection)
        self._result_repo = MatchResultRepository(connection)
        self._audit_log = AuditLogService(connection)
        if allowed_court_names is None:
            allowed_court_names = get_allowed_court_names()
        self._allowed_court_names = tuple(allowed_court_names)

    @property
    def allowed_court_names(self) -> tuple[str, ...]:
        return self._allowed_court_names

    def register_player(
        self,
        name: str,
        *,
        alias: str | None = None,
        phone: str | None = None,
        affiliation_number: str | None = None,
        selected: bool = False,
        role: str = ROLE_PLAYER,
        invited_by: int | None = None,
    ) -> Player:
        name = (name or "").strip()
        if not name:
            raise ValueError("Player name is required.")
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        player_id = self._player_repo.create(
            {
                "name": name,
                "alias": alias or None,
                "phone": phone or None,
                "affiliation_number": affiliation_number or None,
                "selected": selected,
                "role": role,
                "invited_by": invited_by,
            }
        )
        return self.get_player(player_id)

    def get_player(self, player_id: int) -> Player:
        row = self._player_repo.get(player_id)
        if row is None:
            raise NotFoundError("Player", player_id)
        return Player.from_row(row)

    def list_players(self) -> list[Player]:
        return [Player.from_row(row) for row in self._player_repo.list()]

    def selected_players(self) -> list[Player]:
        return [Player.from_row(row) for row in self._player_repo.list_selected()]

    def update_player(self, player_id: int, **changes: Any) -> Player:
        row = self._player_repo.get(player_id)
        if row is None:
            raise NotFoundError("Player", player_id)
        unknown = set(changes) - set(_PLAYER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown player fields: {', '.join(sorted(unknown))}")
        if "role" in changes and changes["role"] not in ROLES:
            raise ValueError(f"Unknown role: {changes['role']}")
        row.update(changes)
        self._player_repo.update(player_id, row)
        return self.get_player(player_id)

    def toggle_selection(self, player_id: int) -> Player:
        player = self.get_player(player_id)
        self._player_repo.set_selected(player_id, not player.selected)
        return self.get_player(player_id)

    def clear_selection(self) -> None:
        for player in self.selected_players():
            self._player_repo.set_selected(player.id, False)

    def find_by_phone(self, phone: str) -> Player | None:
        row = self._player_repo.find_by_phone(phone.strip())
        return Player.from_row(row) if row else None

    def find_by_name(self, name: str) -> Player | None:
        row = self._player_repo.find_by_name(name.strip())
        return Player.from_row(row) if row else None

    def delete_player(self, player_id: int) -> None:
        """Delete a player who has no recorded results."""
        player = self.get_player(player_id)
        results_count = self._result_repo.count_for_player(player_id)
        if results_count:
            raise PlayerInUseError(player_id, results_count)
        self._player_repo.delete(player_id)
        self._audit_log.log_event(
            ROSTER,
            "Player deleted",
            player.name,
            context={"player_id": player_id},
        )

    def create_court(self, name: str) -> Court:
        name = (name or "").strip()
        if name not in self._allowed_court_names:
            raise CourtNameError(
                "Invalid court name. Must be one of: " + ", ".join(self._allowed_court_names)
            )
        court_id = self._court_repo.create({"name": name})
        return Court(id=court_id, name=name)

    def get_court(self, court_id: int) -> Court:
        row = self._court_repo.get(court_id)
        if row is None:
            raise NotFoundError("Court", court_id)
        return Court.from_row(row)

    def list_courts(self) -> list[Court]:
        return [Court.from_row(row) for row in self._court_repo.list()]

    def delete_court(self, court_id: int) -> bool:
        return self._court_repo.delete(court_id)

    def seed_default_courts(self) -> list[Court]:
        """Create every allowed court that does not exist yet."""
        existing = {court.name for court in self.list_courts()}
        created = [
            self.create_court(name)
            for name in self._allowed_court_names
            if name not in existing
        ]
        if created:
            logger.info("Seeded %d courts", len(created))
        return created
