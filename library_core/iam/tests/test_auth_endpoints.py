# library_core/iam/tests/test_auth_endpoints.py
import pytest
from rest_framework.test import APIClient

from library_core.conftest import DEFAULT_PASSWORD
from library_core.iam.services import AuthService

pytestmark = pytest.mark.django_db

AUTH = "/api/v1/auth"


def _login(client, user, password=DEFAULT_PASSWORD):
    return client.post(f"{AUTH}/login/", {"email": user.email, "password": password}, format="json")


def test_login_returns_tokens_profile_and_cookies(anon_api, librarian_account):
    res = _login(anon_api, librarian_account)

    assert res.status_code == 200
    body = res.json()
    assert body["access_token"]
    assert body["refresh_token"]
    assert body["user"] == {
        "id": librarian_account.pk,
        "email": librarian_account.email,
        "name": "Bibliotecario",
        "age": None,
        "role": "librarian",
    }
    assert res.cookies["lib_access"].value == body["access_token"]
    assert res.cookies["lib_access"]["httponly"]
    assert res.cookies["lib_refresh"].value == body["refresh_token"]


def test_login_email_is_case_insensitive(anon_api, librarian_account):
    res = anon_api.post(
        f"{AUTH}/login/",
        {"email": "  BIBLIOTECARIO@biblioteca.com ", "password": DEFAULT_PASSWORD},
        format="json",
    )
    assert res.status_code == 200


@pytest.mark.parametrize("email", ["bibliotecario@biblioteca.com", "nadie@biblioteca.com"])
def test_invalid_credentials(anon_api, librarian_account, email):
    res = anon_api.post(f"{AUTH}/login/", {"email": email, "password": "incorrecta"}, format="json")

    assert res.status_code == 401
    assert res.json()["error"]["message"] == "Credenciales inválidas"
    assert res["WWW-Authenticate"].startswith("Bearer")


def test_login_requires_fields(anon_api):
    res = anon_api.post(f"{AUTH}/login/", {"email": "no-es-email"}, format="json")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_bearer_token_authenticates(anon_api, reader_account):
    token = _login(anon_api, reader_account).json()["access_token"]

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    res = client.get(f"{AUTH}/profile/")

    assert res.status_code == 200
    assert res.json()["email"] == reader_account.email


def test_cookie_authenticates(reader_account):
    client = APIClient()
    _login(client, reader_account)

    res = client.get(f"{AUTH}/profile/")

    assert res.status_code == 200
    assert res.json()["id"] == reader_account.pk


def test_profile_requires_authentication(anon_api):
    res = anon_api.get(f"{AUTH}/profile/")
    assert res.status_code == 401


def test_deleted_user_token_is_rejected(anon_api, admin_api, reader_account):
    token = _login(anon_api, reader_account).json()["access_token"]
    admin_api.delete(f"/api/v1/users/{reader_account.pk}/")

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    assert client.get(f"{AUTH}/profile/").status_code == 401


def test_refresh_from_body(anon_api, reader_account):
    refresh = _login(anon_api, reader_account).json()["refresh_token"]

    res = APIClient().post(f"{AUTH}/refresh/", {"refresh": refresh}, format="json")

    assert res.status_code == 200
    assert res.json()["access_token"]
    assert res.json()["refresh_token"]


def test_refresh_from_cookie(reader_account):
    client = APIClient()
    _login(client, reader_account)

    res = client.post(f"{AUTH}/refresh/", {}, format="json")

    assert res.status_code == 200
    assert res.cookies["lib_access"].value == res.json()["access_token"]


def test_refresh_without_token(anon_api):
    res = anon_api.post(f"{AUTH}/refresh/", {}, format="json")

    assert res.status_code == 401
    assert res.json()["error"]["message"] == "Refresh token requerido"


def test_refresh_with_garbage_token(anon_api):
    res = anon_api.post(f"{AUTH}/refresh/", {"refresh": "no-es-un-token"}, format="json")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "authentication_failed"
    assert res["WWW-Authenticate"].startswith("Bearer")


def test_logout_clears_cookies(reader_account):
    client = APIClient()
    _login(client, reader_account)

    res = client.post(f"{AUTH}/logout/")

    assert res.status_code == 200
    assert res.json() == {"detail": "Sesión cerrada"}
    assert res.cookies["lib_access"].value == ""
    assert client.get(f"{AUTH}/profile/").status_code == 401


def test_resolve_user_id(anon_api, reader_account):
    token = _login(anon_api, reader_account).json()["access_token"]

    assert AuthService.resolve_user_id(token) == reader_account.pk


def test_resolve_user_id_rejects_bad_tokens():
    from rest_framework.exceptions import AuthenticationFailed

    with pytest.raises(AuthenticationFailed):
        AuthService.resolve_user_id("xyz")
