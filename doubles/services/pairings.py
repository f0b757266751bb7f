from __future__ import annotations

import logging
import random
import sqlite3
from typing import Iterable

from doubles.domain.models import Court, Player, normalize_game_date
from doubles.domain.pairing import MODE_RANKED, AllocationPlan, plan_allocation
from doubles.errors import PairingValidationError
from doubles.services.audit_log import GENERATE_PAIRINGS, AuditLogService
from doubles.services.games import GameService
from doubles.services.rankings import RankingService
from doubles.services.roster import RosterService
from doubles.settings import get_default_sets, get_pairing_mode

logger = logging.getLogger(__name__)


class PairingService:
    """Feeds roster, courts and current standings into the allocator."""

    def __init__(self, connection: sqlite3.Connection, rng: random.Random | None = None) -> None:
        self._roster = RosterService(connection)
        self._games = GameService(connection)
        self._rankings = RankingService(connection)
        self._audit_log = AuditLogService(connection)
        self._rng = rng

    def _allocate(
        self,
        players: list[Player],
        courts: list[Court],
        *,
        sets: int,
        game_date: str | None,
        selected_court_ids: Iterable[int] | None,
        mode: str,
        defer_overflow: bool,
        context: dict[str, object],
    ) -> AllocationPlan:
        rankings = self._rankings.rankings() if mode == MODE_RANKED else None
        try:
            plan = plan_allocation(
                players,
                courts,
                rankings,
                sets,
                game_date,
                selected_court_ids,
                mode=mode,
                rng=self._rng,
                defer_overflow=defer_overflow,
            )
        except PairingValidationError as exc:
            self._audit_log.log_error("Pairing generation failed", exc, context=context)
            raise

        if plan.unassigned_pairs:
            logger.warning(
                "%d pair(s) left without a court", len(plan.unassigned_pairs)
            )
        self._audit_log.log_event(
            GENERATE_PAIRINGS,
            "Pairings generated",
            f"mode={mode}, courts={len(plan.pairings)}, waiting={len(plan.waiting)}",
            context={**context, "courts": [item.court_id for item in plan.pairings]},
        )
        return plan

    def generate(
        self,
        *,
        mode: str | None = None,
        sets: int | None = None,
        game_date: str | None = None,
        selected_court_ids: Iterable[int] | None = None,
    ) -> AllocationPlan:
        """Pair the selected players, or everyone when nobody is selected."""
        players = self._roster.selected_players() or self._roster.list_players()
        mode = mode or get_pairing_mode()
        return self._allocate(
            players,
            self._roster.list_courts(),
            sets=sets if sets is not None else get_default_sets(),
            game_date=normalize_game_date(game_date) if game_date else None,
            selected_court_ids=selected_court_ids,
            mode=mode,
            defer_overflow=False,
            context={"mode": mode},
        )

    def generate_for_game(self, game_id: int, *, mode: str | None = None) -> AllocationPlan:
        """Pair the players of a stored game; players that do not fit wait."""
        game = self._games.get_game(game_id)
        roster = {player.id: player for player in self._roster.list_players()}
        players = [roster[player_id] for player_id in game.player_ids if player_id in roster]
        mode = mode or get_pairing_mode()

        plan = self._allocate(
            players,
            self._roster.list_courts(),
            sets=game.sets_per_match,
            game_date=game.game_date,
            selected_court_ids=game.court_ids or None,
            mode=mode,
            defer_overflow=True,
            context={"mode": mode, "game_id": game_id},
        )
        for player in plan.waiting:
            self._games.remove_player(game_id, player.id)
            self._games.add_to_wait_list(game_id, player.id)
            logger.info("Player %s deferred to wait list of game %s", player.id, game_id)
        return plan
