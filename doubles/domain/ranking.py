from __future__ import annotations

from typing import Iterable, Mapping

from doubles.domain.models import (
    PAIR1,
    PAIR2,
    MatchResult,
    Player,
    PlayerRanking,
)

PARTICIPATION_POINTS = 1
BLOWOUT_POINTS = 3
BLOWOUT_SCORES = frozenset({(6, 0), (0, 6)})


def is_blowout(pair1_score: int | None, pair2_score: int | None) -> bool:
    return (pair1_score, pair2_score) in BLOWOUT_SCORES


def index_blowouts(results: Iterable[MatchResult]) -> dict[int, tuple[int, int]]:
    """Count blowout wins and losses per player over the whole history.

    Incomplete results are counted too: the bonus pass looks at every
    recorded result, not only the ones that feed aggregation.
    """
    counts: dict[int, list[int]] = {}
    for result in results:
        if not is_blowout(result.pair1_score, result.pair2_score):
            continue
        winning = result.pair1 if result.winner == PAIR1 else result.pair2
        losing = result.pair2 if result.winner == PAIR1 else result.pair1
        for player_id in set(winning.player_ids):
            counts.setdefault(player_id, [0, 0])[0] += 1
        for player_id in set(losing.player_ids):
            counts.setdefault(player_id, [0, 0])[1] += 1
    return {player_id: (won, lost) for player_id, (won, lost) in counts.items()}


def _apply_match(
    ranking: PlayerRanking,
    *,
    won: bool,
    set_number: int,
    blowouts: tuple[int, int],
) -> None:
    ranking.games_played += 1
    ranking.sets_played += set_number
    ranking.points += PARTICIPATION_POINTS

    blowouts_won, blowouts_lost = blowouts
    if won:
        ranking.games_won += 1
        ranking.sets_won += set_number
        ranking.points += set_number
        ranking.points += BLOWOUT_POINTS * blowouts_won
    else:
        ranking.points -= set_number
        ranking.points -= BLOWOUT_POINTS * blowouts_lost

    ranking.points = max(0, ranking.points)


def recompute_rankings(
    players: Iterable[Player],
    results: Iterable[MatchResult],
) -> dict[int, PlayerRanking]:
    """Rebuild every player's ranking row from the full result history.

    Every roster player gets a row, even without matches. Results that are
    not completed do not count. Player ids that are not on the roster are
    skipped.
    """
    history = list(results)
    rankings = {
        player.id: PlayerRanking(player_id=player.id, player_name=player.name)
        for player in players
    }
    blowouts = index_blowouts(history)

    for result in history:
        if not result.completed:
            continue
        for side, pair in ((PAIR1, result.pair1), (PAIR2, result.pair2)):
            won = result.winner == side
            for player_id in pair.player_ids:
                ranking = rankings.get(player_id)
                if ranking is None:
                    continue
                _apply_match(
                    ranking,
                    won=won,
                    set_number=result.set_number,
                    blowouts=blowouts.get(player_id, (0, 0)),
                )
    return rankings


def sort_rankings(rankings: Iterable[PlayerRanking]) -> list[PlayerRanking]:
    return sorted(rankings, key=lambda item: (-item.points, item.player_id))


def compute_rankings(
    players: Iterable[Player],
    results: Iterable[MatchResult],
) -> list[PlayerRanking]:
    """Return ranking rows sorted by points desc, then player id."""
    return sort_rankings(recompute_rankings(players, results).values())


def unknown_player_ids(
    players: Iterable[Player],
    results: Iterable[MatchResult],
) -> list[int]:
    """Return ids referenced by completed results but missing from the roster."""
    known = {player.id for player in players}
    missing: set[int] = set()
    for result in results:
        if not result.completed:
            continue
        missing.update(pid for pid in result.player_ids if pid not in known)
    return sorted(missing)


def points_by_player(
    rankings: Iterable[PlayerRanking] | Mapping[int, PlayerRanking | int] | None,
) -> dict[int, int]:
    """Normalize ranking input into ``player_id -> points``."""
    if rankings is None:
        return {}
    if isinstance(rankings, Mapping):
        points: dict[int, int] = {}
        for player_id, value in rankings.items():
            if isinstance(value, PlayerRanking):
                points[int(player_id)] = value.points
            else:
                points[int(player_id)] = int(value or 0)
        return points
    return {ranking.player_id: ranking.points for ranking in rankings}
