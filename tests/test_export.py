from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook

from doubles.domain.models import CourtPairing, PlayerRanking
from doubles.services.export_service import (
    PAIRING_COLUMNS,
    RANKING_COLUMNS,
    ExportService,
    pairing_rows,
    ranking_rows,
)
from tests.helpers.factory import make_pair, make_player


def _pairings() -> list[CourtPairing]:
    return [
        CourtPairing(
            court_id=1,
            court_name="Lala",
            pair1=make_pair(make_player(1, alias="Tito"), 8),
            pair2=make_pair(4, 5),
            sets=3,
            game_date="2025-05-10",
        ),
        CourtPairing(
            court_id=2,
            court_name="Moric",
            pair1=make_pair(2, 7),
            pair2=make_pair(3, 6),
            sets=3,
            game_date="2025-05-10",
        ),
    ]


def test_pairing_rows_use_display_names() -> None:
    rows = pairing_rows(_pairings())
    assert rows[0] == ["Lala", "Tito / Player 8", "Player 4 / Player 5", 3, "2025-05-10"]
    assert len(rows) == 2


def test_export_pairings_xlsx(tmp_path: Path) -> None:
    output = ExportService().export_pairings_xlsx(tmp_path / "pairings.xlsx", _pairings())

    assert output.exists()
    sheet = load_workbook(output).active
    assert sheet.title == "Pairings"
    assert sheet["A1"].value == "Court pairings"
    assert sheet["A2"].value == "Game date: 2025-05-10"
    assert [cell.value for cell in sheet[4]] == PAIRING_COLUMNS
    assert [cell.value for cell in sheet[6]][:3] == ["Moric", "Player 2 / Player 7", "Player 3 / Player 6"]
    assert sheet.freeze_panes == "A5"


def test_export_rankings_xlsx(tmp_path: Path) -> None:
    rankings = [
        PlayerRanking(player_id=2, player_name="Beto", games_played=2, games_won=2, sets_played=3, sets_won=3, points=8),
        PlayerRanking(player_id=1, player_name="Ana", games_played=2, games_won=0, sets_played=3, points=0),
    ]
    assert ranking_rows(rankings)[1] == [2, "Ana", 0, 2, 0, 3, 0]

    output = ExportService().export_rankings_xlsx(tmp_path / "rankings.xlsx", rankings)
    sheet = load_workbook(output).active
    assert sheet.title == "Rankings"
    assert [cell.value for cell in sheet[3]] == RANKING_COLUMNS
    assert [cell.value for cell in sheet[4]] == [1, "Beto", 8, 2, 2, 3, 3]
    assert sheet.max_row == 5


def test_header_row_is_styled_and_columns_sized(tmp_path: Path) -> None:
    output = ExportService().export_pairings_xlsx(tmp_path / "pairings.xlsx", _pairings())
    sheet = load_workbook(output).active

    assert sheet["A4"].font.bold is True
    assert sheet["A4"].fill.fgColor.rgb.endswith("1F4E78")
    assert sheet["A1"].font.bold is not True
    assert sheet.column_dimensions["B"].width == len("Player 2 / Player 7") + 2
