from sqlalchemy.exc import IntegrityError

from locallibrary import db, store
from locallibrary.models import Genre


def test_genre_list_sorted_by_name(client, catalog, view):
    response = client.get("/catalog/genres")
    assert response.status_code == 200
    assert [g.name for g in view().genres] == ["Fantasy", "Fiction", "Romance"]


def test_genre_detail_lists_books(client, catalog, view):
    response = client.get(f"/catalog/genre/{catalog['fiction']}")
    assert response.status_code == 200
    page = view()
    assert page.genre.name == "Fiction"
    assert [b.title for b in page.books] == ["Pride and Prejudice"]


def test_genre_detail_unknown_id_is_not_found(client, catalog):
    response = client.get("/catalog/genre/424242")
    assert response.status_code == 404
    assert b"Genre not found" in response.data


def test_create_genre_redirects_to_new_genre(app, client):
    response = client.post("/catalog/genre/create", data={"name": "Poetry"})
    assert response.status_code == 302
    with app.app_context():
        genre = Genre.query.filter_by(name="Poetry").one()
    assert response.headers["Location"] == f"/catalog/genre/{genre.id}"


def test_create_duplicate_genre_redirects_to_existing(app, client, catalog):
    response = client.post("/catalog/genre/create", data={"name": "Fiction"})
    assert response.status_code == 302
    assert response.headers["Location"] == f"/catalog/genre/{catalog['fiction']}"
    with app.app_context():
        assert Genre.query.filter_by(name="Fiction").count() == 1


def test_duplicate_check_is_case_sensitive(app, client, catalog):
    response = client.post("/catalog/genre/create", data={"name": "fiction"})
    assert response.status_code == 302
    assert response.headers["Location"] != f"/catalog/genre/{catalog['fiction']}"


def test_create_genre_race_redirects_to_winner(app, client, catalog, monkeypatch):
    real_find_one = store.find_one
    calls = []

    def find_one(model, *criteria):
        calls.append(model)
        # first lookup misses, as if the other insert had not committed yet
        return None if len(calls) == 1 else real_find_one(model, *criteria)

    monkeypatch.setattr(store, "find_one", find_one)
    response = client.post("/catalog/genre/create", data={"name": "Fiction"})
    assert response.status_code == 302
    assert response.headers["Location"] == f"/catalog/genre/{catalog['fiction']}"
    with app.app_context():
        assert Genre.query.filter_by(name="Fiction").count() == 1


def test_unique_constraint_rejects_second_genre(app, catalog):
    with app.app_context():
        db.session.add(Genre(name="Fiction"))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
        else:
            raise AssertionError("duplicate genre name was stored")


def test_create_genre_empty_name_rerenders(client, view):
    response = client.post("/catalog/genre/create", data={"name": "   "})
    assert response.status_code == 200
    page = view()
    assert [e.message for e in page.errors] == ["Genre name required"]
    assert page.genre.name == ""


def test_update_genre(app, client, catalog):
    response = client.post(f"/catalog/genre/{catalog['romance']}/update", data={"name": "Love stories"})
    assert response.status_code == 302
    assert response.headers["Location"] == f"/catalog/genre/{catalog['romance']}"
    with app.app_context():
        assert db.session.get(Genre, catalog["romance"]).name == "Love stories"


def test_update_genre_form(client, catalog, view):
    response = client.get(f"/catalog/genre/{catalog['romance']}/update")
    assert response.status_code == 200
    assert view().genre.name == "Romance"
    assert client.get("/catalog/genre/999/update").status_code == 404


def test_update_genre_to_taken_name_rerenders(app, client, catalog, view):
    response = client.post(f"/catalog/genre/{catalog['romance']}/update", data={"name": "Fiction"})
    assert response.status_code == 200
    page = view()
    assert [e.field for e in page.errors] == ["name"]
    assert page.genre.name == "Fiction"
    with app.app_context():
        assert db.session.get(Genre, catalog["romance"]).name == "Romance"


def test_genre_delete_is_a_stub(client, catalog):
    assert client.get(f"/catalog/genre/{catalog['fiction']}/delete").data == b"NOT IMPLEMENTED: Genre delete GET"


def test_create_genre_race_without_winner_is_server_error(app, client, catalog, monkeypatch):
    # the lookup keeps missing, so the constraint violation has nowhere to redirect
    monkeypatch.setattr(store, "find_one", lambda model, *criteria: None)
    response = client.post("/catalog/genre/create", data={"name": "Fiction"})
    assert response.status_code == 500
    assert b"Database error" in response.data
    with app.app_context():
        assert Genre.query.filter_by(name="Fiction").count() == 1
