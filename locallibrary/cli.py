from datetime import date

import click

from . import db
from .models import Author, Book, BookInstance, Genre


def seed_catalog():
    """Add a small sample catalog. Returns False if authors already exist."""
    if Author.query.first():
        return False
    austen = Author(first_name="Jane", family_name="Austen", date_of_birth=date(1775, 12, 16),
                    date_of_death=date(1817, 7, 18))
    twain = Author(first_name="Mark", family_name="Twain", date_of_birth=date(1835, 11, 30),
                   date_of_death=date(1910, 4, 21))
    fiction = Genre(name="Fiction")
    satire = Genre(name="Satire")
    pride = Book(title="Pride and Prejudice", author=austen, isbn="9780141439518",
                 summary="A classic novel of manners.", genres=[fiction])
    finn = Book(title="Adventures of Huckleberry Finn", author=twain, isbn="9780486280615",
                summary="A classic American novel.", genres=[fiction, satire])
    copies = [
        BookInstance(book=pride, imprint="Penguin Classics, 2003", status='Available'),
        BookInstance(book=pride, imprint="Penguin Classics, 2003", status='Loaned', due_back=date.today()),
        BookInstance(book=finn, imprint="Dover Thrift, 1994", status='Maintenance'),
    ]
    db.session.add_all([austen, twain, fiction, satire, pride, finn] + copies)
    db.session.commit()
    return True


# --- CLI helper ---
def register_commands(app):

    @app.cli.command("init-db")
    @click.option("--seed", is_flag=True, help="Add sample authors, genres, books and copies.")
    def init_db(seed):
        """Create the catalog tables (and optionally sample data)."""
        db.create_all()
        if not seed:
            click.echo("Initialized DB.")
        elif seed_catalog():
            click.echo("Initialized DB with sample data.")
        else:
            click.echo("DB already initialized.")
