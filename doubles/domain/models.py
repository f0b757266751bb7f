"""Records exchanged between the core, the services and external callers.

``to_dict``/``from_dict`` use the wire shape: camelCase keys, numeric ids,
ISO dates and ``"pair1"``/``"pair2"`` winners. ``from_row`` reads the
snake_case dicts returned by the repositories.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

PAIR1 = "pair1"
PAIR2 = "pair2"
WINNERS = (PAIR1, PAIR2)

ROLE_PLAYER = "player"
ROLE_ADMIN = "admin"
ROLE_SUPERADMIN = "superadmin"
ROLES = (ROLE_PLAYER, ROLE_ADMIN, ROLE_SUPERADMIN)

GAME_PENDING = "pending"
GAME_IN_PROGRESS = "in_progress"
GAME_COMPLETED = "completed"
GAME_STATUSES = (GAME_PENDING, GAME_IN_PROGRESS, GAME_COMPLETED)


def role_allows(role: str | None, required: str) -> bool:
    """Return whether ``role`` grants access to ``required``."""
    if role == ROLE_SUPERADMIN:
        return True
    if role == ROLE_ADMIN and required != ROLE_SUPERADMIN:
        return True
    return role == required


def determine_winner(pair1_score: int, pair2_score: int) -> str:
    """Return the winning side; equal scores go to pair1."""
    if pair2_score > pair1_score:
        return PAIR2
    return PAIR1


def normalize_game_date(value: object) -> str:
    if isinstance(value, date):
        return value.isoformat()
    text = str(value or "").strip()
    if not text:
        raise ValueError("Game date is required.")
    return date.fromisoformat(text[:10]).isoformat()


@dataclass(frozen=True)
class Player:
    id: int
    name: str
    alias: str | None = None
    phone: str | None = None
    affiliation_number: str | None = None
    selected: bool = False
    role: str = ROLE_PLAYER

    @property
    def display_name(self) -> str:
        return self.alias or self.name

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Player":
        return cls(
            id=int(row["id"]),
            name=str(row.get("name") or ""),
            alias=row.get("alias"),
            phone=row.get("phone"),
            affiliation_number=row.get("affiliation_number"),
            selected=bool(row.get("selected")),
            role=str(row.get("role") or ROLE_PLAYER),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "alias": self.alias,
            "phone": self.phone,
            "affiliationNumber": self.affiliation_number,
            "selected": self.selected,
            "role": self.role,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Player":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            alias=data.get("alias"),
            phone=data.get("phone"),
            affiliation_number=data.get("affiliationNumber"),
            selected=bool(data.get("selected") or False),
            role=str(data.get("role") or ROLE_PLAYER),
        )


@dataclass(frozen=True)
class Court:
    id: int
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Court":
        return cls(id=int(row["id"]), name=str(row["name"]))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Court":
        return cls(id=int(data["id"]), name=str(data["name"]))


@dataclass(frozen=True)
class Pair:
    player1: Player
    player2: Player

    @property
    def player_ids(self) -> tuple[int, int]:
        return (self.player1.id, self.player2.id)

    def contains(self, player_id: int) -> bool:
        return player_id in self.player_ids

    def to_dict(self) -> dict[str, Any]:
        return {"player1": self.player1.to_dict(), "player2": self.player2.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pair":
        return cls(
            player1=Player.from_dict(data["player1"]),
            player2=Player.from_dict(data["player2"]),
        )


@dataclass(frozen=True)
class CourtPairing:
    court_id: int
    court_name: str
    pair1: Pair
    pair2: Pair
    sets: int = 1
    game_date: str | None = None

    @property
    def player_ids(self) -> tuple[int, ...]:
        return self.pair1.player_ids + self.pair2.player_ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "courtId": self.court_id,
            "courtName": self.court_name,
            "pair1": self.pair1.to_dict(),
            "pair2": self.pair2.to_dict(),
            "sets": self.sets,
            "gameDate": self.game_date,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CourtPairing":
        game_date = data.get("gameDate")
        return cls(
            court_id=int(data["courtId"]),
            court_name=str(data["courtName"]),
            pair1=Pair.from_dict(data["pair1"]),
            pair2=Pair.from_dict(data["pair2"]),
            sets=int(data.get("sets") or 1),
            game_date=normalize_game_date(game_date) if game_date else None,
        )


@dataclass(frozen=True)
class MatchResult:
    pairing_id: int
    game_date: str
    set_number: int
    pair1_score: int
    pair2_score: int
    winner: str
    pair1: Pair
    pair2: Pair
    court_id: int
    court_name: str
    completed: bool = False
    id: int | None = None

    @property
    def player_ids(self) -> tuple[int, ...]:
        return self.pair1.player_ids + self.pair2.player_ids

    def pair_of(self, player_id: int) -> str | None:
        if self.pair1.contains(player_id):
            return PAIR1
        if self.pair2.contains(player_id):
            return PAIR2
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "pairingId": self.pairing_id,
            "gameDate": self.game_date,
            "setNumber": self.set_number,
            "pair1Score": self.pair1_score,
            "pair2Score": self.pair2_score,
            "winner": self.winner,
            "completed": self.completed,
            "pair1": self.pair1.to_dict(),
            "pair2": self.pair2.to_dict(),
            "courtId": self.court_id,
            "courtName": self.court_name,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MatchResult":
        winner = data.get("winner")
        if winner not in WINNERS:
            raise ValueError(f"Winner must be one of {', '.join(WINNERS)}, got {winner!r}.")
        pair1_score = int(data["pair1Score"])
        pair2_score = int(data["pair2Score"])
        if pair1_score != pair2_score and winner != determine_winner(pair1_score, pair2_score):
            raise ValueError(
                f"Winner {winner!r} does not match the score {pair1_score}-{pair2_score}."
            )
        result_id = data.get("id")
        return cls(
            id=int(result_id) if result_id is not None else None,
            pairing_id=int(data["pairingId"]),
            game_date=normalize_game_date(data["gameDate"]),
            set_number=int(data["setNumber"]),
            pair1_score=pair1_score,
            pair2_score=pair2_score,
            winner=str(winner),
            completed=bool(data.get("completed") or False),
            pair1=Pair.from_dict(data["pair1"]),
            pair2=Pair.from_dict(data["pair2"]),
            court_id=int(data["courtId"]),
            court_name=str(data["courtName"]),
        )


@dataclass
class PlayerRanking:
    player_id: int
    player_name: str = ""
    games_played: int = 0
    games_won: int = 0
    sets_played: int = 0
    sets_won: int = 0
    points: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "gamesPlayed": self.games_played,
            "gamesWon": self.games_won,
            "setsPlayed": self.sets_played,
            "setsWon": self.sets_won,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlayerRanking":
        return cls(
            player_id=int(data["playerId"]),
            player_name=str(data.get("playerName") or ""),
            games_played=int(data.get("gamesPlayed") or 0),
            games_won=int(data.get("gamesWon") or 0),
            sets_played=int(data.get("setsPlayed") or 0),
            sets_won=int(data.get("setsWon") or 0),
            points=int(data.get("points") or 0),
        )


@dataclass
class Game:
    id: int | None
    game_date: str
    court_ids: list[int] = field(default_factory=list)
    status: str = GAME_PENDING
    max_players: int | None = None
    player_ids: list[int] = field(default_factory=list)
    sets_per_match: int = 3
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "gameDate": self.game_date,
            "courtIds": list(self.court_ids),
            "status": self.status,
            "maxPlayers": self.max_players,
            "playerIds": list(self.player_ids),
            "setsPerMatch": self.sets_per_match,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Game":
        status = data.get("status") or GAME_PENDING
        if status not in GAME_STATUSES:
            raise ValueError(f"Unknown game status: {status}")
        game_id = data.get("id")
        max_players = data.get("maxPlayers")
        return cls(
            id=int(game_id) if game_id is not None else None,
            game_date=normalize_game_date(data.get("gameDate") or data.get("date")),
            court_ids=[int(item) for item in data.get("courtIds") or []],
            status=str(status),
            max_players=int(max_players) if max_players is not None else None,
            player_ids=[int(item) for item in data.get("playerIds") or []],
            sets_per_match=int(data.get("setsPerMatch") or 3),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class WaitListPlayer:
    id: int
    name: str
    alias: str | None = None
    phone: str | None = None
    affiliation_number: str | None = None
    selected: bool = False
    role: str = ROLE_PLAYER

    @classmethod
    def from_player(cls, player: Player) -> "WaitListPlayer":
        return cls(
            id=player.id,
            name=player.name,
            alias=player.alias,
            phone=player.phone,
            affiliation_number=player.affiliation_number,
            selected=player.selected,
            role=player.role,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "alias": self.alias,
            "phone": self.phone,
            "affiliationNumber": self.affiliation_number,
            "selected": self.selected,
            "role": self.role,
        }
