from pathlib import Path

from doubles.db.database import get_connection
from doubles.errors import PairingValidationError
from doubles.services.audit_log import (
    ERROR,
    EXPORT_FILE,
    GENERATE_PAIRINGS,
    AuditLogService,
)


def test_log_event_writes_and_filters_records(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "doubles.db")
    service = AuditLogService(connection)

    service.log_event(GENERATE_PAIRINGS, "Pairings", "2 courts filled", context={"courts": 2})
    service.log_event(EXPORT_FILE, "Export", "rankings.xlsx", level="warning", context={"path": "rankings.xlsx"})

    all_events = service.list_events()
    assert len(all_events) == 2
    assert all_events[0].event_type == EXPORT_FILE

    pairing_events = service.list_events(event_type=GENERATE_PAIRINGS)
    assert len(pairing_events) == 1
    assert pairing_events[0].details == "2 courts filled"
    assert pairing_events[0].context == {"courts": 2}

    search_events = service.list_events(query="rankings")
    assert len(search_events) == 1
    assert search_events[0].level == "warning"


def test_log_error_records_type_and_code(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "doubles.db")
    service = AuditLogService(connection)

    error = PairingValidationError(PairingValidationError.PLAYER_MULTIPLE, "Need a multiple of 4 players")
    service.log_error("Pairings rejected", error, context={"players": 5})

    (event,) = service.list_events(event_type=ERROR)
    assert event.level == "error"
    assert event.context["error_type"] == "PairingValidationError"
    assert event.context["code"] == PairingValidationError.PLAYER_MULTIPLE
    assert event.context["players"] == 5


def test_export_log_creates_txt_file(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "doubles.db")
    service = AuditLogService(connection)

    service.log_event(EXPORT_FILE, "Export", "Exported pairings.xlsx")
    output_path = service.export_txt(tmp_path / "audit.txt")

    assert output_path.exists()
    content = output_path.read_text(encoding="utf-8")
    assert "EXPORT_FILE" in content
    assert "Exported pairings.xlsx" in content


def test_level_filter_and_limit(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "doubles.db")
    service = AuditLogService(connection)

    for index in range(3):
        service.log_event(GENERATE_PAIRINGS, "Pairings", f"run {index}")
    service.log_event(EXPORT_FILE, "Export", "failed write", level="warning")

    assert [event.details for event in service.list_events(limit=2)] == ["failed write", "run 2"]
    assert [event.details for event in service.list_events(level="warning")] == ["failed write"]
    assert service.list_events(GENERATE_PAIRINGS, "run 1")[0].format_line().endswith("| run 1")


def test_exported_lines_carry_context(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "doubles.db")
    service = AuditLogService(connection)
    service.log_event(GENERATE_PAIRINGS, "Pairings", "ok", context={"mode": "ranked"})

    content = service.export_txt(tmp_path / "audit.txt").read_text(encoding="utf-8")
    assert content.endswith('| ok | {"mode": "ranked"}')
