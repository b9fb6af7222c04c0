# library_core/conftest.py
import pytest
from rest_framework.test import APIClient

from library_core.audit.recorder import AuditRecorder
from library_core.audit.sink import LogSink, get_log_sink
from library_core.statuses.models import STATUS_ACTIVE, STATUS_DELETED, Status
from library_core.users.models import User, UserRole

DEFAULT_PASSWORD = "Secreta123!"


@pytest.fixture(autouse=True)
def audit_log_dir(settings, tmp_path):
    """
    Every test writes its audit trail to its own directory.
    Changing LIBRARY_AUDIT resets the cached sink and recorder.
    """
    log_dir = tmp_path / "logs"
    settings.LIBRARY_AUDIT = {**settings.LIBRARY_AUDIT, "LOG_DIR": str(log_dir)}
    return log_dir


@pytest.fixture
def audit_sink(audit_log_dir):
    return LogSink(audit_log_dir, echo=False)


@pytest.fixture
def recorder(audit_sink):
    return AuditRecorder(audit_sink)


@pytest.fixture
def audit_records():
    """
    Reads back what the process-wide sink persisted to a stream.
    """
    def _read(stream: str = "audit") -> list[dict]:
        return list(get_log_sink().read(stream))

    return _read


@pytest.fixture
def statuses(db):
    active, _ = Status.objects.get_or_create(name=STATUS_ACTIVE)
    deleted, _ = Status.objects.get_or_create(name=STATUS_DELETED)
    return {"active": active, "deleted": deleted}


@pytest.fixture
def make_user(db, statuses):
    def _make(email: str, *, role: str = UserRole.USER, password: str = DEFAULT_PASSWORD, name: str = "Test User"):
        return User.objects.create_user(email=email, password=password, name=name, role=role)

    return _make


@pytest.fixture
def admin_account(make_user):
    return make_user("admin@biblioteca.com", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
def librarian_account(make_user):
    return make_user("bibliotecario@biblioteca.com", role=UserRole.LIBRARIAN, name="Bibliotecario")


@pytest.fixture
def reader_account(make_user):
    return make_user("lector@biblioteca.com", role=UserRole.USER, name="Lector")


def _client_for(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def admin_api(admin_account):
    return _client_for(admin_account)


@pytest.fixture
def librarian_api(librarian_account):
    return _client_for(librarian_account)


@pytest.fixture
def reader_api(reader_account):
    return _client_for(reader_account)


@pytest.fixture
def anon_api():
    return APIClient()


@pytest.fixture
def genre(statuses):
    from library_core.genres.services import GenreService

    return GenreService.create(name="Novela", description="Narrativa extensa")


@pytest.fixture
def book(genre):
    from library_core.books.services import BookService

    return BookService.create(
        title="Cien años de soledad",
        author="Gabriel García Márquez",
        publisher="Sudamericana",
        price=15000,
        availability=3,
        genre_id=genre.pk,
    )
