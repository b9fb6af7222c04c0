# library_core/statuses/tests/test_statuses_api.py
import pytest

pytestmark = pytest.mark.django_db


def test_admin_lists_statuses(admin_api):
    res = admin_api.get("/api/v1/estados/")
    assert res.status_code == 200
    assert [s["name"] for s in res.json()][:2] == ["activo", "eliminado"]


def test_librarian_cannot_list_statuses(librarian_api):
    res = librarian_api.get("/api/v1/estados/")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"
