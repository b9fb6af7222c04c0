# library_core/audit/tests/test_log_sink.py
import json
from datetime import date

from library_core.audit.sink import LogSink


def _record(**overrides):
    record = {
        "timestamp": "2025-01-10T12:00:00.000Z",
        "level": "info",
        "category": "BOOK_MANAGEMENT",
        "action": "CREATE_BOOK",
        "success": True,
    }
    record.update(overrides)
    return record


def test_info_record_goes_to_application_and_audit(tmp_path):
    sink = LogSink(tmp_path, today=lambda: date(2025, 1, 10), echo=False)

    written = sink.append(_record())

    assert sorted(written) == ["application", "audit"]
    assert (tmp_path / "audit-2025-01-10.log").exists()
    assert not (tmp_path / "security-2025-01-10.log").exists()


def test_security_warning_also_goes_to_security_stream(tmp_path):
    sink = LogSink(tmp_path, today=lambda: date(2025, 1, 10), echo=False)

    written = sink.append(_record(level="warn", category="SECURITY", action="SECURITY_ERROR", success=False))

    assert "security" in written
    assert "error" not in written


def test_error_record_goes_to_error_stream(tmp_path):
    sink = LogSink(tmp_path, today=lambda: date(2025, 1, 10), echo=False)

    written = sink.append(_record(level="error", category="SYSTEM", action="SYSTEM_ERROR", success=False))

    assert "error" in written


def test_lines_are_json_with_service_context(tmp_path):
    sink = LogSink(tmp_path, service="biblioteca-api", environment="test", today=lambda: date(2025, 1, 10), echo=False)
    sink.append(_record(userId=5))

    line = (tmp_path / "audit-2025-01-10.log").read_text(encoding="utf-8").strip()
    data = json.loads(line)

    assert data["action"] == "CREATE_BOOK"
    assert data["message"] == "CREATE_BOOK"
    assert data["userId"] == 5
    assert data["service"] == "biblioteca-api"
    assert data["environment"] == "test"


def test_read_skips_malformed_lines_and_orders_files(tmp_path):
    (tmp_path / "audit-2025-01-02.log").write_text(
        json.dumps(_record(action="SECOND")) + "\n", encoding="utf-8"
    )
    (tmp_path / "audit-2025-01-01.log").write_text(
        "not json\n\n" + json.dumps(_record(action="FIRST")) + "\n[1, 2]\n", encoding="utf-8"
    )

    sink = LogSink(tmp_path, echo=False)

    assert [r["action"] for r in sink.read("audit")] == ["FIRST", "SECOND"]


def test_read_survives_undecodable_bytes(tmp_path):
    path = tmp_path / "audit-2025-01-01.log"
    path.write_bytes(
        b'{"bad": "\xff\xfe"}\n'
        + b"\xff\xfe not json\n"
        + json.dumps(_record(action="AFTER")).encode("utf-8") + b"\n"
    )

    sink = LogSink(tmp_path, echo=False)

    assert [r.get("action") for r in sink.read("audit")] == [None, "AFTER"]


def test_read_of_missing_directory_is_empty(tmp_path):
    sink = LogSink(tmp_path / "nope", echo=False)
    assert list(sink.read("audit")) == []


def test_purge_respects_per_stream_retention(tmp_path):
    today = date(2025, 6, 30)
    for name in (
        "audit-2025-01-01.log",     # 180 days old, audit keeps 90
        "audit-2025-05-01.log",     # 60 days old
        "security-2025-01-01.log",  # security keeps 365
        "application-2025-05-01.log",  # application keeps 30
    ):
        (tmp_path / name).write_text("{}\n", encoding="utf-8")

    sink = LogSink(tmp_path, echo=False)
    removed = sorted(p.name for p in sink.purge_expired(today=today))

    assert removed == ["application-2025-05-01.log", "audit-2025-01-01.log"]
    assert (tmp_path / "security-2025-01-01.log").exists()
    assert (tmp_path / "audit-2025-05-01.log").exists()
