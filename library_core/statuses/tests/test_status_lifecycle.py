# library_core/statuses/tests/test_status_lifecycle.py
import pytest
from django.core.exceptions import ImproperlyConfigured

from library_core.common.api.exceptions import ConflictError
from library_core.statuses.models import STATUS_ACTIVE, STATUS_DELETED, Status
from library_core.statuses.selectors import StatusSelector
from library_core.statuses.services import StatusLifecycle

pytestmark = pytest.mark.django_db


def test_migrations_seed_both_statuses():
    assert set(Status.objects.values_list("name", flat=True)) >= {STATUS_ACTIVE, STATUS_DELETED}


def test_new_rows_start_active(book):
    assert book.status.name == STATUS_ACTIVE
    assert book.deleted_at is None
    assert book.restored_at is None


def test_delete_then_restore_round_trip(book):
    deleted = StatusLifecycle.soft_delete(book)
    assert deleted.status.name == STATUS_DELETED
    assert deleted.deleted_at is not None
    assert deleted.restored_at is None

    restored = StatusLifecycle.restore(deleted)
    assert restored.status.name == STATUS_ACTIVE
    assert restored.deleted_at is None
    assert restored.restored_at is not None


def test_double_delete_conflicts(book):
    StatusLifecycle.soft_delete(book)

    with pytest.raises(ConflictError) as exc:
        StatusLifecycle.soft_delete(book)

    assert "ya se encuentra eliminado" in str(exc.value.detail)


def test_restore_of_active_row_conflicts(book):
    with pytest.raises(ConflictError) as exc:
        StatusLifecycle.restore(book)

    assert "no se encuentra eliminado" in str(exc.value.detail)


def test_stale_instance_cannot_delete_twice(book):
    """
    Two callers holding the same row: only the first transition wins.
    """
    from library_core.books.models import Book

    first = Book.objects.get(pk=book.pk)
    second = Book.objects.get(pk=book.pk)

    StatusLifecycle.soft_delete(first)
    with pytest.raises(ConflictError):
        StatusLifecycle.soft_delete(second)


def test_custom_conflict_message(book):
    StatusLifecycle.soft_delete(book)

    with pytest.raises(ConflictError) as exc:
        StatusLifecycle.soft_delete(book, conflict_message="ya borrado")

    assert str(exc.value.detail) == "ya borrado"


def test_resolve_ids_match_rows(statuses):
    assert StatusSelector.resolve_active_id() == statuses["active"].id
    assert StatusSelector.resolve_deleted_id() == statuses["deleted"].id


def test_resolve_id_uses_configured_fallback(settings):
    settings.LIBRARY_STATUS_FALLBACK_IDS = {"archivado": 7}
    assert StatusSelector.resolve_id("archivado") == 7


def test_resolve_id_without_fallback_fails_loudly(settings):
    settings.LIBRARY_STATUS_FALLBACK_IDS = {STATUS_ACTIVE: 1, "archivado": None}

    with pytest.raises(ImproperlyConfigured):
        StatusSelector.resolve_id("archivado")


def test_ensure_defaults_is_idempotent(statuses):
    assert StatusLifecycle.ensure_defaults() == 0
    assert Status.objects.filter(name__in=[STATUS_ACTIVE, STATUS_DELETED]).count() == 2


def test_ensure_statuses_command_recreates_missing_rows(statuses):
    from io import StringIO

    from django.core.management import call_command

    statuses["deleted"].delete()

    out = StringIO()
    call_command("ensure_statuses", stdout=out)

    assert "Newly created: 1" in out.getvalue()
    assert Status.objects.filter(name=STATUS_DELETED).exists()
