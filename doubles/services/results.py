from __future__ import annotations

import dataclasses
import logging
import sqlite3
from typing import Any, Mapping

from doubles.db.repositories import MatchResultRepository, PlayerRepository
from doubles.domain.models import (
    WINNERS,
    MatchResult,
    Pair,
    Player,
    determine_winner,
    normalize_game_date,
)
from doubles.errors import MatchResultError, NotFoundError
from doubles.services.audit_log import RECORD_RESULT, UPDATE_RESULT, AuditLogService

logger = logging.getLogger(__name__)

_RESULT_FIELDS = {item.name for item in dataclasses.fields(MatchResult)} - {"id"}


def _player_or_stub(player_id: int, players_by_id: Mapping[int, Player]) -> Player:
    return players_by_id.get(player_id) or Player(id=player_id, name="")


def result_from_row(row: Mapping[str, Any], players_by_id: Mapping[int, Player]) -> MatchResult:
    """Build a MatchResult, keeping ids of players no longer on the roster."""
    return MatchResult(
        id=int(row["id"]),
        pairing_id=int(row["pairing_id"]),
        game_date=str(row["game_date"]),
        set_number=int(row["set_number"]),
        pair1_score=int(row["pair1_score"]),
        pair2_score=int(row["pair2_score"]),
        winner=str(row["winner"]),
        completed=bool(row["completed"]),
        pair1=Pair(
            player1=_player_or_stub(int(row["pair1_player1_id"]), players_by_id),
            player2=_player_or_stub(int(row["pair1_player2_id"]), players_by_id),
        ),
        pair2=Pair(
            player1=_player_or_stub(int(row["pair2_player1_id"]), players_by_id),
            player2=_player_or_stub(int(row["pair2_player2_id"]), players_by_id),
        ),
        court_id=int(row["court_id"]),
        court_name=str(row["court_name"]),
    )


def result_to_row(result: MatchResult) -> dict[str, Any]:
    return {
        "pairing_id": result.pairing_id,
        "game_date": result.game_date,
        "set_number": result.set_number,
        "pair1_score": result.pair1_score,
        "pair2_score": result.pair2_score,
        "winner": result.winner,
        "completed": result.completed,
        "pair1_player1_id": result.pair1.player1.id,
        "pair1_player2_id": result.pair1.player2.id,
        "pair2_player1_id": result.pair2.player1.id,
        "pair2_player2_id": result.pair2.player2.id,
        "court_id": result.court_id,
        "court_name": result.court_name,
    }


def validate_result(result: MatchResult) -> MatchResult:
    """Check a result and return it with a normalized date."""
    if result.set_number < 1:
        raise MatchResultError("Set number must be at least 1.")
    if result.pair1_score < 0 or result.pair2_score < 0:
        raise MatchResultError("Scores cannot be negative.")
    if result.winner not in WINNERS:
        raise MatchResultError(f"Winner must be one of {', '.join(WINNERS)}.")
    if len(set(result.player_ids)) != len(result.player_ids):
        raise MatchResultError("The four players of a match must be distinct.")
    if result.pair1_score != result.pair2_score:
        expected = determine_winner(result.pair1_score, result.pair2_score)
        if result.winner != expected:
            raise MatchResultError(
                f"Winner must be {expected}: it scored {max(result.pair1_score, result.pair2_score)} "
                f"against {min(result.pair1_score, result.pair2_score)}."
            )
    try:
        game_date = normalize_game_date(result.game_date)
    except ValueError as exc:
        raise MatchResultError(f"Invalid game date: {result.game_date!r}") from exc
    return dataclasses.replace(result, game_date=game_date)


class ResultService:
    """Records set results entered after each match."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._result_repo = MatchResultRepository(connection)
        self._player_repo = PlayerRepository(connection)
        self._audit_log = AuditLogService(connection)

    def _players_by_id(self) -> dict[int, Player]:
        return {int(row["id"]): Player.from_row(row) for row in self._player_repo.list()}

    def record_result(
        self,
        *,
        pairing_id: int,
        game_date: str,
        pair1: Pair,
        pair2: Pair,
        court_id: int,
        court_name: str,
        pair1_score: int,
        pair2_score: int,
        set_number: int | None = None,
        winner: str | None = None,
        completed: bool = True,
    ) -> MatchResult:
        """Store one set result.

        ``set_number`` defaults to the next set of the pairing. ``winner``
        defaults to the side with the higher score, pair1 on a tie.
        """
        if set_number is None:
            set_number = self.next_set_number(pairing_id)
        if winner is None:
            winner = determine_winner(pair1_score, pair2_score)
        result = validate_result(
            MatchResult(
                pairing_id=pairing_id,
                game_date=game_date,
                set_number=set_number,
                pair1_score=pair1_score,
                pair2_score=pair2_score,
                winner=winner,
                pair1=pair1,
                pair2=pair2,
                court_id=court_id,
                court_name=court_name,
                completed=completed,
            )
        )
        return self.save_result(result)

    def save_result(self, result: MatchResult) -> MatchResult:
        result = validate_result(result)
        result_id = self._result_repo.create(result_to_row(result))
        stored = dataclasses.replace(result, id=result_id)
        self._audit_log.log_event(
            RECORD_RESULT,
            "Result recorded",
            f"{stored.court_name} set {stored.set_number}: "
            f"{stored.pair1_score}-{stored.pair2_score}",
            context={"result_id": result_id, "pairing_id": stored.pairing_id},
        )
        return stored

    def update_result(self, result_id: int, **changes: Any) -> MatchResult:
        """Replace fields of a stored result, keeping its id."""
        current = self.get_result(result_id)
        changes.pop("id", None)
        unknown = set(changes) - _RESULT_FIELDS
        if unknown:
            raise ValueError(f"Unknown result fields: {', '.join(sorted(unknown))}")
        if "winner" not in changes and ({"pair1_score", "pair2_score"} & set(changes)):
            changes["winner"] = determine_winner(
                changes.get("pair1_score", current.pair1_score),
                changes.get("pair2_score", current.pair2_score),
            )
        updated = validate_result(dataclasses.replace(current, **changes))
        self._result_repo.update(result_id, result_to_row(updated))
        self._audit_log.log_event(
            UPDATE_RESULT,
            "Result updated",
            f"result_id={result_id}",
            context={"result_id": result_id, "fields": sorted(changes)},
        )
        return updated

    def get_result(self, result_id: int) -> MatchResult:
        row = self._result_repo.get(result_id)
        if row is None:
            raise NotFoundError("Match result", result_id)
        return result_from_row(row, self._players_by_id())

    def list_results(self, game_date: str | None = None) -> list[MatchResult]:
        if game_date is not None:
            rows = self._result_repo.search(game_date=normalize_game_date(game_date))
        else:
            rows = self._result_repo.list()
        players_by_id = self._players_by_id()
        return [result_from_row(row, players_by_id) for row in rows]

    def next_set_number(self, pairing_id: int) -> int:
        return self._result_repo.max_set_number(pairing_id) + 1
