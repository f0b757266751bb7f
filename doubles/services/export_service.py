from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from doubles.domain.models import CourtPairing, Pair, PlayerRanking

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
MAX_COLUMN_WIDTH = 40

PAIRING_COLUMNS = ["Court", "Pair 1", "Pair 2", "Sets", "Date"]
RANKING_COLUMNS = [
    "Place",
    "Player",
    "Points",
    "Games played",
    "Games won",
    "Sets played",
    "Sets won",
]


def _pair_label(pair: Pair) -> str:
    return f"{pair.player1.display_name} / {pair.player2.display_name}"


def pairing_rows(pairings: Iterable[CourtPairing]) -> list[list[object]]:
    return [
        [
            pairing.court_name,
            _pair_label(pairing.pair1),
            _pair_label(pairing.pair2),
            pairing.sets,
            pairing.game_date or "",
        ]
        for pairing in pairings
    ]


def ranking_rows(rankings: Iterable[PlayerRanking]) -> list[list[object]]:
    return [
        [
            place,
            ranking.player_name,
            ranking.points,
            ranking.games_played,
            ranking.games_won,
            ranking.sets_played,
            ranking.sets_won,
        ]
        for place, ranking in enumerate(rankings, start=1)
    ]


class ExportService:
    def export_pairings_xlsx(
        self,
        path: str | Path,
        pairings: Sequence[CourtPairing],
        game_date: str | None = None,
    ) -> Path:
        label = game_date or next((item.game_date for item in pairings if item.game_date), None)
        header_lines = [
            "Court pairings",
            f"Game date: {label or 'not set'}",
            f"Exported: {self.format_date_label()}",
        ]
        self.export_dataset_xlsx(
            path, header_lines, PAIRING_COLUMNS, pairing_rows(pairings), title="Pairings"
        )
        return Path(path)

    def export_rankings_xlsx(self, path: str | Path, rankings: Sequence[PlayerRanking]) -> Path:
        header_lines = ["Player rankings", f"Exported: {self.format_date_label()}"]
        self.export_dataset_xlsx(
            path, header_lines, RANKING_COLUMNS, ranking_rows(rankings), title="Rankings"
        )
        return Path(path)

    def export_dataset_xlsx(
        self,
        path: str | Path,
        header_lines: Iterable[str],
        columns: Sequence[str],
        rows: Sequence[Sequence[object]],
        title: str = "Export",
    ) -> None:
        """Write header lines, a styled column row and the data rows to one sheet."""
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = title

        for line in header_lines:
            sheet.append([line])

        sheet.append(list(columns))
        header_row = sheet.max_row
        for cell in sheet[header_row]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center")

        widths = [len(str(name)) for name in columns]
        for row in rows:
            sheet.append(list(row))
            for index, value in enumerate(row):
                if value is not None:
                    widths[index] = max(widths[index], len(str(value)))

        sheet.freeze_panes = sheet.cell(row=header_row + 1, column=1)
        for index, width in enumerate(widths, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = min(width + 2, MAX_COLUMN_WIDTH)
        workbook.save(str(path))

    @staticmethod
    def format_date_label() -> str:
        return date.today().isoformat()
