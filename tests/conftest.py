from datetime import date

import pytest
from flask import template_rendered

from locallibrary import create_app, db
from locallibrary.models import Author, Book, BookInstance, Genre


@pytest.fixture
def app(tmp_path, request):
    # Unique SQLite file per test so fan-out worker threads see committed rows
    db_file = tmp_path / f"catalog_{request.node.name}.db"
    app = create_app({
        "TESTING": True,
        "WTF_CSRF_ENABLED": False,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
        "SECRET_KEY": "test",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def captured_templates(app):
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template, context))

    template_rendered.connect(record, app)
    try:
        yield recorded
    finally:
        template_rendered.disconnect(record, app)


@pytest.fixture
def view(captured_templates):
    """Return the view-model of the most recently rendered page."""
    def last():
        assert captured_templates, "no template rendered"
        return captured_templates[-1][1]["view"]
    return last


@pytest.fixture
def catalog(app):
    """Seed a small catalog and return the ids of what was created."""
    with app.app_context():
        austen = Author(first_name="Jane", family_name="Austen", date_of_birth=date(1775, 12, 16))
        tolkien = Author(first_name="John", family_name="Tolkien")
        fiction = Genre(name="Fiction")
        romance = Genre(name="Romance")
        fantasy = Genre(name="Fantasy")
        pride = Book(title="Pride and Prejudice", author=austen, summary="Manners.",
                     isbn="9780141439518", genres=[fiction, romance])
        hobbit = Book(title="The Hobbit", author=tolkien, summary="There and back again.",
                      isbn="9780547928227", genres=[fantasy])
        copies = [
            BookInstance(book=pride, imprint="Penguin, 2003", status="Available"),
            BookInstance(book=pride, imprint="Penguin, 2003", status="Loaned", due_back=date(2030, 1, 5)),
            BookInstance(book=hobbit, imprint="Houghton, 2012", status="Available"),
            BookInstance(book=hobbit, imprint="Houghton, 2012", status="Maintenance"),
        ]
        db.session.add_all([austen, tolkien, fiction, romance, fantasy, pride, hobbit] + copies)
        db.session.commit()
        return {
            "austen": austen.id,
            "tolkien": tolkien.id,
            "fiction": fiction.id,
            "romance": romance.id,
            "fantasy": fantasy.id,
            "pride": pride.id,
            "hobbit": hobbit.id,
            "copies": [c.id for c in copies],
        }
