from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable

from doubles.db.repositories import GameRepository, PlayerRepository, WaitListRepository
from doubles.domain.models import (
    GAME_PENDING,
    GAME_STATUSES,
    Game,
    Player,
    WaitListPlayer,
    normalize_game_date,
)
from doubles.errors import NotFoundError
from doubles.services.audit_log import WAIT_LIST, AuditLogService
from doubles.settings import get_default_sets

logger = logging.getLogger(__name__)

_GAME_FIELDS = (
    "game_date",
    "court_ids",
    "status",
    "max_players",
    "player_ids",
    "sets_per_match",
    "description",
)


def game_from_row(row: dict[str, Any]) -> Game:
    return Game(
        id=int(row["id"]),
        game_date=str(row["game_date"]),
        court_ids=list(row.get("court_ids") or []),
        status=str(row.get("status") or GAME_PENDING),
        max_players=row.get("max_players"),
        player_ids=list(row.get("player_ids") or []),
        sets_per_match=int(row.get("sets_per_match") or 3),
        description=row.get("description"),
    )


def _game_to_row(game: Game) -> dict[str, Any]:
    return {
        "game_date": game.game_date,
        "court_ids": list(game.court_ids),
        "status": game.status,
        "max_players": game.max_players,
        "player_ids": list(game.player_ids),
        "sets_per_match": game.sets_per_match,
        "description": game.description,
    }


def _validate_game(game: Game) -> None:
    if game.status not in GAME_STATUSES:
        raise ValueError(f"Unknown game status: {game.status}")
    if game.sets_per_match < 1:
        raise ValueError("Sets per match must be at least 1.")
    if game.max_players is not None and game.max_players < 0:
        raise ValueError("Max players cannot be negative.")


class GameService:
    """Game days, their player lists and wait lists."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._game_repo = GameRepository(connection)
        self._player_repo = PlayerRepository(connection)
        self._wait_list_repo = WaitListRepository(connection)
        self._audit_log = AuditLogService(connection)

    def create_game(
        self,
        game_date: str,
        court_ids: Iterable[int],
        *,
        sets_per_match: int | None = None,
        max_players: int | None = None,
        player_ids: Iterable[int] = (),
        description: str | None = None,
    ) -> Game:
        game = Game(
            id=None,
            game_date=normalize_game_date(game_date),
            court_ids=[int(item) for item in court_ids],
            max_players=max_players,
            player_ids=list(dict.fromkeys(int(item) for item in player_ids)),
            sets_per_match=sets_per_match if sets_per_match is not None else get_default_sets(),
            description=description,
        )
        _validate_game(game)
        game.id = self._game_repo.create(_game_to_row(game))
        return game

    def get_game(self, game_id: int) -> Game:
        row = self._game_repo.get(game_id)
        if row is None:
            raise NotFoundError("Game", game_id)
        return game_from_row(row)

    def list_games(self) -> list[Game]:
        return [game_from_row(row) for row in self._game_repo.list()]

    def update_game(self, game_id: int, **changes: Any) -> Game:
        game = self.get_game(game_id)
        unknown = set(changes) - set(_GAME_FIELDS)
        if unknown:
            raise ValueError(f"Unknown game fields: {', '.join(sorted(unknown))}")
        for key, value in changes.items():
            setattr(game, key, value)
        game.game_date = normalize_game_date(game.game_date)
        _validate_game(game)
        self._game_repo.update(game_id, _game_to_row(game))
        return game

    def delete_game(self, game_id: int) -> bool:
        self._wait_list_repo.clear(game_id)
        return self._game_repo.delete(game_id)

    def _require_player(self, player_id: int) -> Player:
        row = self._player_repo.get(player_id)
        if row is None:
            raise NotFoundError("Player", player_id)
        return Player.from_row(row)

    def add_player(self, game_id: int, player_id: int) -> bool:
        """Add a player to the game, or to its wait list when the game is full.

        Returns True when the player got a place in the game.
        """
        game = self.get_game(game_id)
        self._require_player(player_id)
        if player_id in game.player_ids:
            return True
        if game.max_players is not None and len(game.player_ids) >= game.max_players:
            self.add_to_wait_list(game_id, player_id)
            return False
        game.player_ids.append(player_id)
        self._game_repo.update(game_id, _game_to_row(game))
        return True

    def remove_player(self, game_id: int, player_id: int) -> bool:
        game = self.get_game(game_id)
        if player_id not in game.player_ids:
            return False
        game.player_ids.remove(player_id)
        self._game_repo.update(game_id, _game_to_row(game))
        return True

    def wait_list(self, game_id: int) -> list[WaitListPlayer]:
        return [
            WaitListPlayer.from_player(Player.from_row(row))
            for row in self._wait_list_repo.list_for_game(game_id)
        ]

    def add_to_wait_list(self, game_id: int, player_id: int) -> WaitListPlayer | None:
        """Queue a player; returns None if they were already waiting."""
        self.get_game(game_id)
        player = self._require_player(player_id)
        if not self._wait_list_repo.add(game_id, player_id):
            return None
        self._audit_log.log_event(
            WAIT_LIST,
            "Added to wait list",
            player.name,
            context={"game_id": game_id, "player_id": player_id},
        )
        return WaitListPlayer.from_player(player)

    def remove_from_wait_list(self, game_id: int, player_id: int) -> bool:
        return self._wait_list_repo.remove(game_id, player_id)

    def move_from_wait_list_to_game(self, game_id: int, player_id: int) -> bool:
        """Give a waiting player a place in the game and mark them selected."""
        game = self.get_game(game_id)
        player = self._require_player(player_id)
        if not self._wait_list_repo.contains(game_id, player_id):
            return False
        self._player_repo.set_selected(player_id, True)
        if player_id not in game.player_ids:
            game.player_ids.append(player_id)
            self._game_repo.update(game_id, _game_to_row(game))
        self._wait_list_repo.remove(game_id, player_id)
        self._audit_log.log_event(
            WAIT_LIST,
            "Moved from wait list",
            player.name,
            context={"game_id": game_id, "player_id": player_id},
        )
        logger.info("Player %s moved from wait list into game %s", player_id, game_id)
        return True
