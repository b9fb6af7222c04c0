# library_core/genres/tests/test_genres_api.py
import pytest

from library_core.genres.services import NAME_TAKEN, NAME_TAKEN_DELETED, GenreService

pytestmark = pytest.mark.django_db

BASE = "/api/v1/generos"


@pytest.fixture
def catalog(statuses):
    genres = {name: GenreService.create(name=name) for name in ("Poesía", "ensayo", "Drama", "Cuento")}
    GenreService.remove(genre_id=genres["Drama"].pk)
    return genres


def _names(data):
    return [g["name"] for g in data]


def test_list_is_unpaginated_by_default(reader_api, catalog):
    res = reader_api.get(f"{BASE}/")

    assert res.status_code == 200
    assert isinstance(res.json(), list)
    assert "Drama" not in _names(res.json())


def test_list_paginates_on_request(librarian_api, catalog):
    res = librarian_api.get(f"{BASE}/", {"limit": 2})

    body = res.json()
    assert body["total"] == 4
    assert body["page"] == 1
    assert body["totalPages"] == 2
    assert len(body["data"]) == 2


def test_search_by_name_and_status(librarian_api, catalog):
    res = librarian_api.get(f"{BASE}/search/", {"nombre": "ENS"})
    assert _names(res.json()["data"]) == ["ensayo"]

    res = librarian_api.get(f"{BASE}/search/", {"estado": "eliminado"})
    assert _names(res.json()["data"]) == ["Drama"]


def test_search_orders_active_first(librarian_api, catalog):
    res = librarian_api.get(f"{BASE}/search/")
    assert _names(res.json()["data"]) == ["Cuento", "ensayo", "Poesía", "Drama"]


def test_create_and_conflicts(librarian_api, catalog):
    res = librarian_api.post(f"{BASE}/", {"name": "Fantasía", "description": "Mundos imaginarios"}, format="json")
    assert res.status_code == 201
    assert res.json()["status"] == "activo"

    res = librarian_api.post(f"{BASE}/", {"name": "cuento"}, format="json")
    assert res.status_code == 409
    assert res.json()["error"]["message"] == NAME_TAKEN

    res = librarian_api.post(f"{BASE}/", {"name": "drama"}, format="json")
    assert res.status_code == 409
    assert res.json()["error"]["message"] == NAME_TAKEN_DELETED


def test_update_genre(librarian_api, catalog):
    genre = catalog["ensayo"]

    res = librarian_api.patch(f"{BASE}/{genre.pk}/", {"description": "No ficción"}, format="json")
    assert res.status_code == 200
    assert res.json()["description"] == "No ficción"

    res = librarian_api.patch(f"{BASE}/{genre.pk}/", {"name": "Cuento"}, format="json")
    assert res.status_code == 409


def test_restore_is_admin_only(librarian_api, admin_api, catalog):
    drama = catalog["Drama"]

    assert librarian_api.patch(f"{BASE}/{drama.pk}/restore/").status_code == 403

    res = admin_api.patch(f"{BASE}/{drama.pk}/restore/")
    assert res.status_code == 200
    assert res.json()["status"] == "activo"

    res = admin_api.patch(f"{BASE}/{drama.pk}/restore/")
    assert res.status_code == 409
    assert res.json()["error"]["message"] == f"El género con ID {drama.pk} no se encuentra eliminado"


def test_delete_twice_conflicts(librarian_api, catalog):
    genre = catalog["Cuento"]

    assert librarian_api.delete(f"{BASE}/{genre.pk}/").json()["status"] == "eliminado"

    res = librarian_api.delete(f"{BASE}/{genre.pk}/")
    assert res.status_code == 409
    assert res.json()["error"]["message"] == f"El género con ID {genre.pk} ya se encuentra eliminado"


def test_readers_cannot_see_deleted_genres(reader_api, catalog):
    res = reader_api.get(f"{BASE}/{catalog['Drama'].pk}/")

    assert res.status_code == 404
    assert res.json()["error"]["message"] == f"Género con ID {catalog['Drama'].pk} no encontrado"


def test_readers_cannot_create(reader_api, statuses):
    assert reader_api.post(f"{BASE}/", {"name": "Terror"}, format="json").status_code == 403


def test_name_is_validated(librarian_api, statuses):
    res = librarian_api.post(f"{BASE}/", {"name": "X"}, format="json")
    assert res.status_code == 400
    assert "name" in res.json()["error"]["details"]
