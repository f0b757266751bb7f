"""Court allocation for doubles play.

Two modes are supported. ``ranked`` seeds players by ranking points so that
each pair and each court carry a similar combined strength. ``random``
shuffles the pool and fills courts four players at a time.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from doubles.domain.models import Court, CourtPairing, Pair, Player, PlayerRanking
from doubles.domain.ranking import points_by_player
from doubles.errors import PairingValidationError

MODE_RANKED = "ranked"
MODE_RANDOM = "random"
PAIRING_MODES = (MODE_RANKED, MODE_RANDOM)

PLAYERS_PER_COURT = 4

RankingsInput = Iterable[PlayerRanking] | Mapping[int, PlayerRanking | int] | None


@dataclass
class AllocationPlan:
    pairings: list[CourtPairing] = field(default_factory=list)
    waiting: list[Player] = field(default_factory=list)
    unassigned_pairs: list[Pair] = field(default_factory=list)


def courts_required(player_count: int) -> int:
    return player_count // PLAYERS_PER_COURT


def validate_pairings(player_count: int, court_count: int) -> None:
    """Raise ``PairingValidationError`` when the pool cannot fill courts."""
    if player_count < PLAYERS_PER_COURT:
        raise PairingValidationError(
            PairingValidationError.INSUFFICIENT_PLAYERS,
            f"At least {PLAYERS_PER_COURT} players are needed to generate pairings "
            f"(currently {player_count}).",
        )
    if player_count % PLAYERS_PER_COURT != 0:
        raise PairingValidationError(
            PairingValidationError.PLAYER_MULTIPLE,
            f"Need a multiple of {PLAYERS_PER_COURT} players for even pairings "
            f"(currently {player_count}).",
        )
    required = courts_required(player_count)
    if court_count < required:
        raise PairingValidationError(
            PairingValidationError.INSUFFICIENT_COURTS,
            f"Need {required} court{'s' if required != 1 else ''} for {player_count} players "
            f"(currently {court_count} available).",
        )


def select_courts(courts: Sequence[Court], selected_court_ids: Iterable[int] | None) -> list[Court]:
    """Restrict courts to ``selected_court_ids`` in the order they were given."""
    if selected_court_ids is None:
        return list(courts)
    by_id = {court.id: court for court in courts}
    selected: list[Court] = []
    for court_id in selected_court_ids:
        court = by_id.get(int(court_id))
        if court is not None and court not in selected:
            selected.append(court)
    return selected


def unique_players(players: Iterable[Player]) -> list[Player]:
    seen: set[int] = set()
    unique: list[Player] = []
    for player in players:
        if player.id in seen:
            continue
        seen.add(player.id)
        unique.append(player)
    return unique


def seed_by_points(players: Sequence[Player], points: Mapping[int, int]) -> list[Player]:
    """Sort players by descending points, keeping input order on ties."""
    return sorted(players, key=lambda player: -points.get(player.id, 0))


def snake_pairs(seeded: Sequence[Player]) -> list[Pair]:
    """Pair seed ``i`` with seed ``N-1-i``."""
    count = len(seeded)
    return [Pair(player1=seeded[i], player2=seeded[count - 1 - i]) for i in range(count // 2)]


def pair_points(pair: Pair, points: Mapping[int, int]) -> int:
    return points.get(pair.player1.id, 0) + points.get(pair.player2.id, 0)


def _assign_ranked(
    players: Sequence[Player],
    courts: Sequence[Court],
    points: Mapping[int, int],
    sets: int,
    game_date: str | None,
) -> tuple[list[CourtPairing], list[Pair]]:
    pairs = snake_pairs(seed_by_points(players, points))
    pairs.sort(key=lambda pair: -pair_points(pair, points))

    pairings: list[CourtPairing] = []
    used: set[int] = set()
    total = len(pairs)
    for index, court in enumerate(courts):
        top, bottom = index, total - 1 - index
        if top >= bottom:
            break
        pairings.append(
            CourtPairing(
                court_id=court.id,
                court_name=court.name,
                pair1=pairs[top],
                pair2=pairs[bottom],
                sets=sets,
                game_date=game_date,
            )
        )
        used.update((top, bottom))
    leftover = [pair for index, pair in enumerate(pairs) if index not in used]
    return pairings, leftover


def _assign_random(
    players: Sequence[Player],
    courts: Sequence[Court],
    sets: int,
    game_date: str | None,
) -> list[CourtPairing]:
    pairings: list[CourtPairing] = []
    for index, court in enumerate(courts):
        group = players[index * PLAYERS_PER_COURT:(index + 1) * PLAYERS_PER_COURT]
        if len(group) < PLAYERS_PER_COURT:
            break
        pairings.append(
            CourtPairing(
                court_id=court.id,
                court_name=court.name,
                pair1=Pair(player1=group[0], player2=group[1]),
                pair2=Pair(player1=group[2], player2=group[3]),
                sets=sets,
                game_date=game_date,
            )
        )
    return pairings


def plan_allocation(
    players: Iterable[Player],
    courts: Iterable[Court],
    rankings: RankingsInput = None,
    sets: int = 1,
    game_date: str | None = None,
    selected_court_ids: Iterable[int] | None = None,
    *,
    mode: str = MODE_RANKED,
    rng: random.Random | None = None,
    defer_overflow: bool = False,
) -> AllocationPlan:
    """Allocate players to courts as two pairs each.

    With ``defer_overflow`` the players that do not fit on the available
    courts are returned in ``AllocationPlan.waiting`` instead of failing
    validation. In ranked mode those are the lowest-ranked players, in
    random mode whoever lands past the cutoff after shuffling.
    """
    if mode not in PAIRING_MODES:
        raise ValueError(f"Unknown pairing mode: {mode}")
    if sets < 1:
        raise ValueError("Sets per match must be at least 1.")

    pool = unique_players(players)
    available = select_courts(list(courts), selected_court_ids)
    points = points_by_player(rankings)

    if mode == MODE_RANKED:
        ordered = seed_by_points(pool, points)
    else:
        ordered = list(pool)
        (rng or random.Random()).shuffle(ordered)

    plan = AllocationPlan()
    capacity = len(available) * PLAYERS_PER_COURT
    if defer_overflow and 0 < capacity < len(ordered):
        ordered, plan.waiting = ordered[:capacity], ordered[capacity:]

    validate_pairings(len(ordered), len(available))

    if mode == MODE_RANKED:
        plan.pairings, plan.unassigned_pairs = _assign_ranked(
            ordered, available, points, sets, game_date
        )
    else:
        plan.pairings = _assign_random(ordered, available, sets, game_date)
    return plan


def allocate_pairings(
    players: Iterable[Player],
    courts: Iterable[Court],
    rankings: RankingsInput = None,
    sets: int = 1,
    game_date: str | None = None,
    selected_court_ids: Iterable[int] | None = None,
    *,
    mode: str = MODE_RANKED,
    rng: random.Random | None = None,
    defer_overflow: bool = False,
) -> list[CourtPairing]:
    return plan_allocation(
        players,
        courts,
        rankings,
        sets,
        game_date,
        selected_court_ids,
        mode=mode,
        rng=rng,
        defer_overflow=defer_overflow,
    ).pairings


def generate_pairings(
    players: Iterable[Player],
    courts: Iterable[Court],
    ranking_points: RankingsInput,
    sets: int,
    game_date: str | None,
) -> list[CourtPairing]:
    """Ranked snake seeding over all courts."""
    return allocate_pairings(players, courts, ranking_points, sets, game_date, mode=MODE_RANKED)
