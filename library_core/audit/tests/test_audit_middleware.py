# library_core/audit/tests/test_audit_middleware.py
import pytest

from library_core.conftest import DEFAULT_PASSWORD

LOGIN_URL = "/api/v1/auth/login/"


@pytest.mark.django_db
def test_failed_login_is_audited_once_with_security_error(anon_api, admin_account, audit_records):
    res = anon_api.post(LOGIN_URL, {"email": admin_account.email, "password": "incorrecta"}, format="json")

    assert res.status_code == 401
    body = res.json()
    assert body["error"]["code"] == "authentication_failed"
    assert body["error"]["message"] == "Credenciales inválidas"
    assert res["X-Request-ID"] == body["error"]["request_id"]

    records = audit_records("audit")
    assert [r["action"] for r in records] == ["LOGIN_FAILURE", "SECURITY_ERROR"]

    failure = records[0]
    assert failure["category"] == "AUTH"
    assert failure["success"] is False
    assert "userId" not in failure
    assert failure["metadata"] == {"requestId": res["X-Request-ID"]}

    security = audit_records("security")
    assert len(security) == 1
    assert security[0]["details"]["statusCode"] == 401
    assert security[0]["details"]["endpoint"] == LOGIN_URL


@pytest.mark.django_db
def test_successful_login_is_attributed_to_the_user(anon_api, admin_account, audit_records):
    res = anon_api.post(LOGIN_URL, {"email": admin_account.email, "password": DEFAULT_PASSWORD}, format="json")

    assert res.status_code == 200
    (entry,) = audit_records("audit")
    assert entry["action"] == "LOGIN_SUCCESS"
    assert entry["userId"] == admin_account.pk
    assert entry["userEmail"] == admin_account.email
    assert entry["details"]["statusCode"] == 200
    assert "password" not in str(entry)


@pytest.mark.django_db
def test_authenticated_reads_carry_the_actor(reader_api, reader_account, book, audit_records):
    res = reader_api.get("/api/v1/libros/search/", {"titulo": "soledad"})

    assert res.status_code == 200
    (entry,) = audit_records("audit")
    assert entry["category"] == "DATA_ACCESS"
    assert entry["action"] == "SEARCH_LIBROS"
    assert entry["userId"] == reader_account.pk
    assert entry["details"] == {"filters": {"titulo": "soledad"}}


@pytest.mark.django_db
def test_forbidden_requests_add_security_error(reader_api, audit_records):
    res = reader_api.get("/api/v1/users/")

    assert res.status_code == 403
    actions = [r["action"] for r in audit_records("audit")]
    assert actions == ["READ_USERS", "SECURITY_ERROR"]


@pytest.mark.django_db
def test_non_api_paths_are_not_audited(client, audit_records):
    client.get("/uploads/libros/missing.png")

    assert audit_records("audit") == []


@pytest.mark.django_db
def test_sink_failures_do_not_change_the_response(anon_api, admin_account, monkeypatch):
    from library_core.audit.sink import get_log_sink

    def boom(record):
        raise OSError("disk full")

    monkeypatch.setattr(get_log_sink(), "append", boom)

    res = anon_api.post(LOGIN_URL, {"email": admin_account.email, "password": DEFAULT_PASSWORD}, format="json")
    assert res.status_code == 200
    assert "access_token" in res.json()
