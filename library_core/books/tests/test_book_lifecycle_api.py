# library_core/books/tests/test_book_lifecycle_api.py
import pytest

from library_core.books.models import Book
from library_core.books.services import BOOK_EXISTS, BOOK_EXISTS_DELETED

pytestmark = pytest.mark.django_db

BASE = "/api/v1/libros"


def _payload(genre, **overrides):
    data = {
        "title": "Cien años de soledad",
        "author": "Gabriel García Márquez",
        "publisher": "Sudamericana",
        "price": 15000,
        "genre_id": genre.pk,
    }
    data.update(overrides)
    return data


def _error(res):
    return res.json()["error"]


def test_delete_restore_round_trip(librarian_api, reader_api, book, genre):
    url = f"{BASE}/{book.pk}/"

    # soft delete returns the deleted row
    res = librarian_api.delete(url)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "eliminado"
    assert body["deleted_at"] is not None
    assert Book.objects.filter(pk=book.pk).exists()

    # deleting twice is a conflict
    res = librarian_api.delete(url)
    assert res.status_code == 409
    assert _error(res)["code"] == "conflict"
    assert _error(res)["message"] == f"El libro con ID {book.pk} ya se encuentra eliminado"

    # plain readers no longer see it, staff still do
    assert reader_api.get(url).status_code == 404
    assert librarian_api.get(url).json()["status"] == "eliminado"

    # re-creating the same title/publisher points at restore
    res = librarian_api.post(f"{BASE}/", _payload(genre, title="cien años de soledad"), format="json")
    assert res.status_code == 409
    assert _error(res)["message"] == BOOK_EXISTS_DELETED

    res = librarian_api.patch(f"{url}restore/")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "activo"
    assert body["deleted_at"] is None
    assert body["restored_at"] is not None

    res = librarian_api.patch(f"{url}restore/")
    assert res.status_code == 409
    assert _error(res)["message"] == f"El libro con ID {book.pk} no se encuentra eliminado"

    res = librarian_api.post(f"{BASE}/", _payload(genre), format="json")
    assert res.status_code == 409
    assert _error(res)["message"] == BOOK_EXISTS


def test_create_book(librarian_api, genre):
    res = librarian_api.post(f"{BASE}/", _payload(genre, title="  Rayuela ", availability=2), format="json")

    assert res.status_code == 201
    body = res.json()
    assert body["title"] == "Rayuela"
    assert body["genre"] == "Novela"
    assert body["genre_id"] == genre.pk
    assert body["availability"] == 2
    assert body["status"] == "activo"
    assert body["image_url"] is None


def test_same_title_other_publisher_is_allowed(librarian_api, book, genre):
    res = librarian_api.post(f"{BASE}/", _payload(genre, publisher="Cátedra"), format="json")
    assert res.status_code == 201


def test_create_requires_active_genre(librarian_api, genre):
    librarian_api.delete(f"/api/v1/generos/{genre.pk}/")

    res = librarian_api.post(f"{BASE}/", _payload(genre), format="json")

    assert res.status_code == 404
    assert _error(res)["message"] == f"Género con ID {genre.pk} no encontrado"


def test_create_validates_payload(librarian_api, genre):
    res = librarian_api.post(f"{BASE}/", _payload(genre, price=-1), format="json")

    assert res.status_code == 400
    assert _error(res)["code"] == "validation_error"
    assert "price" in _error(res)["details"]


def test_readers_cannot_write(reader_api, book, genre):
    assert reader_api.post(f"{BASE}/", _payload(genre, title="Otro"), format="json").status_code == 403
    assert reader_api.patch(f"{BASE}/{book.pk}/", {"price": 1}, format="json").status_code == 403
    assert reader_api.delete(f"{BASE}/{book.pk}/").status_code == 403
    assert reader_api.patch(f"{BASE}/{book.pk}/restore/").status_code == 403


def test_anonymous_is_rejected(anon_api):
    res = anon_api.get(f"{BASE}/")
    assert res.status_code == 401
    assert _error(res)["code"] == "not_authenticated"


def test_update_book(librarian_api, book):
    res = librarian_api.patch(f"{BASE}/{book.pk}/", {"availability": 0, "author": "G. García Márquez"}, format="json")

    assert res.status_code == 200
    assert res.json()["availability"] == 0
    assert res.json()["author"] == "G. García Márquez"


def test_update_cannot_collide_with_other_book(librarian_api, book, genre):
    other = librarian_api.post(f"{BASE}/", _payload(genre, title="Rayuela"), format="json").json()

    res = librarian_api.patch(f"{BASE}/{other['id']}/", {"title": book.title}, format="json")

    assert res.status_code == 409
    assert _error(res)["message"] == BOOK_EXISTS


def test_empty_update_is_rejected(librarian_api, book):
    assert librarian_api.patch(f"{BASE}/{book.pk}/", {}, format="json").status_code == 400


def test_unknown_book(librarian_api):
    res = librarian_api.get(f"{BASE}/999/")
    assert res.status_code == 404
    assert _error(res)["message"] == "Libro con ID 999 no encontrado."
