# library_core/statuses/management/commands/ensure_statuses.py

from django.core.management.base import BaseCommand

from library_core.statuses.services import StatusLifecycle


class Command(BaseCommand):
    help = 'Ensure the "activo" and "eliminado" statuses exist (idempotent).'

    def handle(self, *args, **options):
        created = StatusLifecycle.ensure_defaults()
        self.stdout.write(self.style.SUCCESS(f"Statuses ensured. Newly created: {created}"))
