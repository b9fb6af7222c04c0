# library_core/audit/tests/test_purge_command.py
from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.utils import timezone


def _touch(directory, name):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text('{"action": "X"}\n', encoding="utf-8")
    return path


def test_purge_removes_only_expired_files(audit_log_dir):
    today = timezone.localdate()
    old = _touch(audit_log_dir, f"audit-{(today - timedelta(days=120)).isoformat()}.log")
    recent = _touch(audit_log_dir, f"audit-{(today - timedelta(days=10)).isoformat()}.log")
    security = _touch(audit_log_dir, f"security-{(today - timedelta(days=120)).isoformat()}.log")

    out = StringIO()
    call_command("purge_audit_logs", stdout=out)

    assert "Removed 1 expired log file(s)." in out.getvalue()
    assert not old.exists()
    assert recent.exists()
    assert security.exists()


def test_dry_run_keeps_files(audit_log_dir):
    today = timezone.localdate()
    old = _touch(audit_log_dir, f"error-{(today - timedelta(days=45)).isoformat()}.log")

    out = StringIO()
    call_command("purge_audit_logs", "--dry-run", stdout=out)

    assert str(old) in out.getvalue()
    assert "1 file(s) would be removed." in out.getvalue()
    assert old.exists()
