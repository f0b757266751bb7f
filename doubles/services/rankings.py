from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field

from doubles.db.repositories import MatchResultRepository, PlayerRepository
from doubles.domain.models import MatchResult, Player, PlayerRanking
from doubles.domain.ranking import recompute_rankings, sort_rankings, unknown_player_ids
from doubles.services.audit_log import RECALC_RANKINGS, AuditLogService
from doubles.services.results import result_from_row

logger = logging.getLogger(__name__)


@dataclass
class RankingReport:
    rankings: list[PlayerRanking] = field(default_factory=list)
    results_processed: int = 0
    results_skipped: int = 0
    warnings: list[str] = field(default_factory=list)

    def by_player(self) -> dict[int, PlayerRanking]:
        return {ranking.player_id: ranking for ranking in self.rankings}


class RankingService:
    """Rebuilds standings from the stored result history."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._player_repo = PlayerRepository(connection)
        self._result_repo = MatchResultRepository(connection)
        self._audit_log = AuditLogService(connection)

    def _snapshot(self) -> tuple[list[Player], list[MatchResult]]:
        players = [Player.from_row(row) for row in self._player_repo.list()]
        players_by_id = {player.id: player for player in players}
        results = [result_from_row(row, players_by_id) for row in self._result_repo.list()]
        return players, results

    def recalculate(self, *, audit: bool = False) -> RankingReport:
        players, results = self._snapshot()
        report = RankingReport(
            rankings=sort_rankings(recompute_rankings(players, results).values()),
        )
        report.results_processed = sum(1 for result in results if result.completed)
        report.results_skipped = len(results) - report.results_processed

        for player_id in unknown_player_ids(players, results):
            message = f"player_id={player_id}: referenced by results but not registered"
            logger.warning("Ranking skipped unknown %s", message)
            report.warnings.append(message)

        if audit:
            self._audit_log.log_event(
                RECALC_RANKINGS,
                "Rankings recalculated",
                f"processed={report.results_processed}, skipped={report.results_skipped}",
                level="warning" if report.warnings else "info",
                context={"warnings": report.warnings},
            )
        return report

    def rankings(self) -> list[PlayerRanking]:
        return self.recalculate().rankings


def recalculate_rankings(*, connection: sqlite3.Connection) -> RankingReport:
    return RankingService(connection).recalculate(audit=True)
