from __future__ import annotations

from pathlib import Path

import pytest

from doubles.__main__ import main
from doubles.db.database import get_connection
from doubles.services.audit_log import EXPORT_FILE, AuditLogService
from doubles.services.games import GameService
from doubles.services.roster import RosterService


@pytest.fixture()
def db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("DOUBLES_ALLOWED_COURTS", "Lala,AR")
    monkeypatch.delenv("DOUBLES_PAIRING_MODE", raising=False)
    monkeypatch.delenv("DOUBLES_DEFAULT_SETS", raising=False)
    path = tmp_path / "cli.db"
    connection = get_connection(path)
    roster = RosterService(connection)
    for index in range(1, 9):
        roster.register_player(f"Player {index}")
    connection.close()
    return path


def test_seed_courts_then_pairings(db_path: Path, tmp_path: Path, capsys) -> None:
    assert main(["--db", str(db_path), "seed-courts"]) == 0
    assert "Courts created: 2" in capsys.readouterr().out

    export_path = tmp_path / "pairings.xlsx"
    code = main(
        ["--db", str(db_path), "pairings", "--sets", "2", "--date", "2025-05-10", "--export", str(export_path)]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines()[0] == "Court | Pair 1 | Pair 2 | Sets | Date"
    assert "Lala | Player 1 / Player 8 | Player 4 / Player 5 | 2 | 2025-05-10" in out
    assert export_path.exists()

    connection = get_connection(db_path)
    events = AuditLogService(connection).list_events(event_type=EXPORT_FILE)
    connection.close()
    assert events[0].details == str(export_path)


def test_rankings_command_prints_table(db_path: Path, tmp_path: Path, capsys) -> None:
    export_path = tmp_path / "rankings.xlsx"
    assert main(["--db", str(db_path), "rankings", "--export", str(export_path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Place | Player | Points")
    assert lines[1] == "1 | Player 1 | 0 | 0 | 0 | 0 | 0"
    assert len(lines) == 9
    assert export_path.exists()


def test_pairings_for_game_reports_waiting_players(db_path: Path, capsys) -> None:
    main(["--db", str(db_path), "seed-courts"])
    connection = get_connection(db_path)
    RosterService(connection).register_player("Late Arrival")
    game = GameService(connection).create_game("2025-05-10", [1], sets_per_match=1, player_ids=range(1, 10))
    connection.close()
    capsys.readouterr()

    assert main(["--db", str(db_path), "pairings", "--game", str(game.id), "--mode", "random", "--seed", "4"]) == 0
    out = capsys.readouterr().out
    assert out.count("waiting: ") == 5


def test_validation_errors_exit_with_code_2(db_path: Path, capsys) -> None:
    code = main(["--db", str(db_path), "pairings", "--mode", "ranked"])
    assert code == 2
    assert "error:" in capsys.readouterr().err

    assert main(["--db", str(db_path), "pairings", "--date", "someday"]) == 2


def test_audit_command_lists_and_exports(db_path: Path, tmp_path: Path, capsys) -> None:
    main(["--db", str(db_path), "pairings", "--mode", "ranked"])
    capsys.readouterr()

    export_path = tmp_path / "audit.txt"
    assert main(["--db", str(db_path), "audit", "--type", "ERROR", "--export", str(export_path)]) == 0
    out = capsys.readouterr().out
    assert "ERROR ERROR | Pairing generation failed" in out
    assert f"Audit log written to {export_path}" in out
    assert "insufficient_courts" in export_path.read_text(encoding="utf-8")
