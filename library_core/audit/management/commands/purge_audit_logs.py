# library_core/audit/management/commands/purge_audit_logs.py
from __future__ import annotations

from django.core.management.base import BaseCommand

from library_core.audit.sink import get_log_sink


class Command(BaseCommand):
    help = "Delete audit log files older than each stream's retention window."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="List expired files without deleting them.")

    def handle(self, *args, **options):
        sink = get_log_sink()

        if options["dry_run"]:
            expired = sink.expired_files()
            for path in expired:
                self.stdout.write(str(path))
            self.stdout.write(self.style.WARNING(f"{len(expired)} file(s) would be removed."))
            return

        removed = sink.purge_expired()
        self.stdout.write(self.style.SUCCESS(f"Removed {len(removed)} expired log file(s)."))
