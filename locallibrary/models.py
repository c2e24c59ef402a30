from datetime import date

from . import db

BOOK_STATUSES = ('Available', 'Maintenance', 'Loaned', 'Reserved')


def _format_date(value):
    return value.strftime("%b %d, %Y").replace(" 0", " ") if value else ""


book_genres = db.Table(
    'book_genres',
    db.Column('book_id', db.Integer, db.ForeignKey('books.id'), primary_key=True),
    db.Column('genre_id', db.Integer, db.ForeignKey('genres.id'), primary_key=True),
)


# -----------------------
# Models
# -----------------------
class Author(db.Model):
    __tablename__ = 'authors'
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    family_name = db.Column(db.String(100), nullable=False, index=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    date_of_death = db.Column(db.Date, nullable=True)

    books = db.relationship('Book', back_populates='author')

    @property
    def name(self):
        return f"{self.family_name}, {self.first_name}"

    @property
    def lifespan(self):
        if not self.date_of_birth and not self.date_of_death:
            return ""
        return f"{_format_date(self.date_of_birth)} - {_format_date(self.date_of_death)}"

    @property
    def url(self):
        return f"/catalog/author/{self.id}"


class Genre(db.Model):
    __tablename__ = 'genres'
    id = db.Column(db.Integer, primary_key=True)
    # unique at the storage layer; the create flow also checks before inserting
    name = db.Column(db.String(100), nullable=False, unique=True, index=True)

    @property
    def url(self):
        return f"/catalog/genre/{self.id}"


class Book(db.Model):
    __tablename__ = 'books'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(500), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('authors.id'), nullable=False)
    summary = db.Column(db.Text, nullable=False)
    isbn = db.Column(db.String(50), nullable=False)

    # eager so rows read on a worker thread stay usable once its session closes
    author = db.relationship('Author', back_populates='books', lazy='joined')
    genres = db.relationship('Genre', secondary=book_genres, lazy='selectin', order_by='Genre.name')

    @property
    def url(self):
        return f"/catalog/book/{self.id}"


class BookInstance(db.Model):
    __tablename__ = 'book_instances'
    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey('books.id'), nullable=False, index=True)
    imprint = db.Column(db.String(500), nullable=False)
    status = db.Column(db.Enum(*BOOK_STATUSES, name='book_status'), nullable=False, default='Maintenance')
    due_back = db.Column(db.Date, nullable=True, default=date.today)

    book = db.relationship('Book', lazy='joined')

    @property
    def due_back_formatted(self):
        return _format_date(self.due_back)

    @property
    def url(self):
        return f"/catalog/bookinstance/{self.id}"
