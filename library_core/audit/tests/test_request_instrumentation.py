# library_core/audit/tests/test_request_instrumentation.py
import pytest

from library_core.audit.entries import Actor, ClientInfo
from library_core.audit.instrumentation import (
    RequestInstrumentation,
    RequestOutcome,
    classify_operation,
    extract_resource_id,
    extract_resource_type,
    is_security_relevant,
)

PREFIXES = ("/api/v1/", "/api/")


@pytest.mark.parametrize(
    "method,path,expected",
    [
        ("POST", "/api/v1/auth/login/", "LOGIN"),
        ("GET", "/api/v1/libros/search/", "SEARCH"),
        ("GET", "/api/v1/libros/export/csv/", "EXPORT"),
        ("PATCH", "/api/v1/generos/3/restore/", "RESTORE"),
        ("POST", "/api/v1/libros/3/imagen/", "UPLOAD_IMAGE"),
        ("GET", "/api/v1/audit/reports/", "GENERATE_REPORT"),
        ("GET", "/api/v1/libros/", "READ"),
        ("DELETE", "/api/v1/libros/4/", "DELETE"),
        ("OPTIONS", "/api/v1/libros/", "OPERATION"),
    ],
)
def test_classify_operation(method, path, expected):
    assert classify_operation(method, path) == expected


def test_resource_type_and_id():
    assert extract_resource_type("/api/v1/libros/12/restore/", PREFIXES) == "libros"
    assert extract_resource_id("/api/v1/libros/12/restore/", PREFIXES) == 12
    assert extract_resource_id("/api/v1/libros/", PREFIXES) is None
    assert extract_resource_id("/api/v1/libros/0/", PREFIXES) is None
    assert extract_resource_type("/api/v1/", PREFIXES) == "unknown"


def test_security_relevance():
    assert is_security_relevant(403, "/api/v1/users/", None)
    assert is_security_relevant(400, "/api/v1/auth/refresh/", None)
    assert is_security_relevant(400, "/api/v1/libros/", "Token inválido o expirado")
    assert not is_security_relevant(409, "/api/v1/libros/", "Ya existe un libro")


def _instrumentation(recorder, **kwargs):
    return RequestInstrumentation(recorder, api_prefixes=PREFIXES, **kwargs)


def _records(audit_sink, stream="audit"):
    return list(audit_sink.read(stream))


def test_successful_login_is_an_auth_entry(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(
            method="POST",
            path="/api/v1/auth/login/",
            status_code=200,
            duration_ms=20,
            actor=Actor(user_id=1, email="a@b.com", role="admin"),
            client=ClientInfo(ip_address="10.1.1.1"),
            request_id="abc",
        )
    )

    (entry,) = _records(audit_sink)
    assert entry["category"] == "AUTH"
    assert entry["action"] == "LOGIN_SUCCESS"
    assert entry["userId"] == 1
    assert entry["ipAddress"] == "10.1.1.1"
    assert entry["metadata"] == {"requestId": "abc"}


def test_failed_login_adds_security_error(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(
            method="POST",
            path="/api/v1/auth/login/",
            status_code=401,
            duration_ms=5,
            error_message="Credenciales inválidas",
        )
    )

    login, security = _records(audit_sink)
    assert login["action"] == "LOGIN_FAILURE"
    assert login["success"] is False
    assert login["level"] == "warn"
    assert security["action"] == "SECURITY_ERROR"
    assert security["details"] == {
        "error": "Credenciales inválidas",
        "endpoint": "/api/v1/auth/login/",
        "method": "POST",
        "statusCode": 401,
    }


def test_book_reads_are_data_access(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(
            method="GET",
            path="/api/v1/libros/search/",
            status_code=200,
            duration_ms=10,
            query={"titulo": "soledad"},
        )
    )

    (entry,) = _records(audit_sink)
    assert entry["category"] == "DATA_ACCESS"
    assert entry["action"] == "SEARCH_LIBROS"
    assert entry["resourceType"] == "libros"
    assert entry["details"] == {"filters": {"titulo": "soledad"}}


def test_book_writes_are_book_management(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(method="DELETE", path="/api/v1/libros/7/", status_code=200, duration_ms=10)
    )

    (entry,) = _records(audit_sink)
    assert entry["category"] == "BOOK_MANAGEMENT"
    assert entry["action"] == "DELETE_BOOK"
    assert entry["resourceId"] == 7


def test_genre_writes_are_genre_management(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(method="POST", path="/api/v1/generos/", status_code=201, duration_ms=10)
    )

    (entry,) = _records(audit_sink)
    assert entry["category"] == "GENRE_MANAGEMENT"
    assert entry["action"] == "CREATE_GENERO"


def test_audit_endpoints_are_security_entries(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(method="GET", path="/api/v1/audit/statistics/", status_code=200, duration_ms=10)
    )

    (entry,) = _records(audit_sink)
    assert entry["category"] == "SECURITY"
    assert entry["action"] == "VIEW_AUDIT_STATISTICS"


def test_unknown_resources_fall_back_to_system(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(method="GET", path="/api/v1/health/", status_code=200, duration_ms=10)
    )

    (entry,) = _records(audit_sink)
    assert entry["category"] == "SYSTEM"
    assert entry["action"] == "READ_HEALTH"
    assert entry["details"]["resourceType"] == "health"


def test_not_found_is_security_relevant(recorder, audit_sink):
    _instrumentation(recorder).record(
        RequestOutcome(
            method="GET",
            path="/api/v1/libros/999/",
            status_code=404,
            duration_ms=3,
            error_message="Libro con ID 999 no encontrado.",
        )
    )

    actions = [r["action"] for r in _records(audit_sink)]
    assert actions == ["READ_LIBROS", "SECURITY_ERROR"]


def test_slow_requests_add_performance_entry(recorder, audit_sink):
    _instrumentation(recorder, slow_operation_ms=100).record(
        RequestOutcome(method="GET", path="/api/v1/libros/", status_code=200, duration_ms=250)
    )

    read, perf = _records(audit_sink)
    assert read["action"] == "READ_LIBROS"
    assert perf["action"] == "PERFORMANCE_LIBROS_READ"
    assert perf["duration"] == 250


def test_slow_failures_do_not_add_performance_entry(recorder, audit_sink):
    _instrumentation(recorder, slow_operation_ms=100).record(
        RequestOutcome(method="POST", path="/api/v1/libros/", status_code=409, duration_ms=250)
    )

    assert [r["action"] for r in _records(audit_sink)] == ["CREATE_BOOK"]
