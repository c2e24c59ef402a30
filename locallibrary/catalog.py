"""Catalog request handlers, one per (resource, action), mounted at /catalog."""

import logging
from datetime import date

from flask import Blueprint, redirect, render_template, url_for
from sqlalchemy.exc import IntegrityError

from . import store
from .errors import RecordNotFound
from .forms import AuthorForm, BookForm, BookInstanceForm, FieldError, GenreForm, form_errors, rejected_input
from .models import BOOK_STATUSES, Author, Book, BookInstance, Genre
from .parallel import parallel
from .viewmodels import (
    AuthorDetailView, AuthorFormView, AuthorListView, BookDetailView, BookFormView,
    BookInstanceDetailView, BookInstanceFormView, BookInstanceListView, BookListView,
    GenreDetailView, GenreFormView, GenreListView, IndexView, checked_options, status_options,
)

logger = logging.getLogger(__name__)

catalog = Blueprint('catalog', __name__)


def _not_implemented(what):
    return f"NOT IMPLEMENTED: {what}"


@catalog.get('/')
def index():
    results = parallel(
        book_count=lambda: store.count(Book),
        book_instance_count=lambda: store.count(BookInstance),
        book_instance_available_count=lambda: store.count(BookInstance, BookInstance.status == 'Available'),
        author_count=lambda: store.count(Author),
        genre_count=lambda: store.count(Genre),
    )
    return render_template('index.html', view=IndexView(title="Local Library Home", **results))


# -----------------------
# Books
# -----------------------
def _book_reference_data():
    return parallel(
        authors=lambda: store.find(Author, order_by=Author.family_name),
        genres=lambda: store.find(Genre, order_by=Genre.name),
    )


def _book_form_view(title, action, refs, book=None, selected_author=None, selected_genres=(), errors=None):
    return BookFormView(
        title=title,
        action=action,
        authors=checked_options(refs['authors'], [selected_author]),
        genres=checked_options(refs['genres'], selected_genres),
        book=book,
        errors=errors or [],
    )


@catalog.get('/books')
def book_list():
    books = store.find(Book, order_by=Book.title)
    return render_template('book_list.html', view=BookListView(title="Book List", books=books))


@catalog.get('/book/<int:book_id>')
def book_detail(book_id):
    results = parallel(
        book=lambda: store.find_by_id(Book, book_id),
        book_instances=lambda: store.find(BookInstance, BookInstance.book_id == book_id),
    )
    if results['book'] is None:
        raise RecordNotFound("Book not found")
    view = BookDetailView(title=results['book'].title, **results)
    return render_template('book_detail.html', view=view)


@catalog.get('/book/create')
def book_create_get():
    refs = _book_reference_data()
    view = _book_form_view("Create Book", url_for('catalog.book_create_post'), refs)
    return render_template('book_form.html', view=view)


@catalog.post('/book/create')
def book_create_post():
    form = BookForm()
    valid = form.validate_on_submit()
    book = Book(
        title=form.title.data,
        author_id=form.author.data,
        summary=form.summary.data,
        isbn=form.isbn.data,
    )

    if not valid:
        refs = _book_reference_data()
        view = _book_form_view("Create Book", url_for('catalog.book_create_post'), refs, book=book,
                               selected_author=form.author.data, selected_genres=form.genre.data,
                               errors=form_errors(form))
        return render_template('book_form.html', view=view)

    book.genres = _genres_by_id(form.genre.data)
    store.save(book)
    return redirect(book.url)


@catalog.get('/book/<int:book_id>/update')
def book_update_get(book_id):
    results = parallel(
        book=lambda: store.find_by_id(Book, book_id),
        authors=lambda: store.find(Author, order_by=Author.family_name),
        genres=lambda: store.find(Genre, order_by=Genre.name),
    )
    book = results['book']
    if book is None:
        raise RecordNotFound("Book not found")
    view = _book_form_view("Update Book", url_for('catalog.book_update_post', book_id=book_id), results,
                           book=book, selected_author=book.author_id,
                           selected_genres=[g.id for g in book.genres])
    return render_template('book_form.html', view=view)


@catalog.post('/book/<int:book_id>/update')
def book_update_post(book_id):
    form = BookForm()
    valid = form.validate_on_submit()
    book = Book(
        id=book_id,
        title=form.title.data,
        author_id=form.author.data,
        summary=form.summary.data,
        isbn=form.isbn.data,
    )

    if not valid:
        refs = _book_reference_data()
        view = _book_form_view("Update Book", url_for('catalog.book_update_post', book_id=book_id), refs,
                               book=book, selected_author=form.author.data,
                               selected_genres=form.genre.data, errors=form_errors(form))
        return render_template('book_form.html', view=view)

    updated = store.find_by_id_and_replace(Book, book_id, {
        'title': book.title,
        'author_id': book.author_id,
        'summary': book.summary,
        'isbn': book.isbn,
        'genres': _genres_by_id(form.genre.data),
    }, "Book not found")
    return redirect(updated.url)


@catalog.get('/book/<int:book_id>/delete')
def book_delete_get(book_id):
    return _not_implemented("Book delete GET")


@catalog.post('/book/<int:book_id>/delete')
def book_delete_post(book_id):
    return _not_implemented("Book delete POST")


def _genres_by_id(ids):
    if not ids:
        return []
    return store.find(Genre, Genre.id.in_(ids), order_by=Genre.name)


# -----------------------
# Authors
# -----------------------
def _author_from_form(form, author_id=None):
    return Author(
        id=author_id,
        first_name=form.first_name.data,
        family_name=form.family_name.data,
        date_of_birth=form.date_of_birth.data,
        date_of_death=form.date_of_death.data,
    )


@catalog.get('/authors')
def author_list():
    authors = store.find(Author, order_by=Author.family_name)
    return render_template('author_list.html', view=AuthorListView(title="Author List", authors=authors))


@catalog.get('/author/<int:author_id>')
def author_detail(author_id):
    results = parallel(
        author=lambda: store.find_by_id(Author, author_id),
        books=lambda: store.find(Book, Book.author_id == author_id, order_by=Book.title),
    )
    if results['author'] is None:
        raise RecordNotFound("Author not found")
    return render_template('author_detail.html', view=AuthorDetailView(title="Author Detail", **results))


@catalog.get('/author/create')
def author_create_get():
    view = AuthorFormView(title="Create Author", action=url_for('catalog.author_create_post'))
    return render_template('author_form.html', view=view)


@catalog.post('/author/create')
def author_create_post():
    form = AuthorForm()
    author = _author_from_form(form)
    if not form.validate_on_submit():
        view = AuthorFormView(title="Create Author", action=url_for('catalog.author_create_post'),
                              author=author, errors=form_errors(form), rejected=rejected_input(form))
        return render_template('author_form.html', view=view)

    store.save(author)
    return redirect(author.url)


@catalog.get('/author/<int:author_id>/update')
def author_update_get(author_id):
    author = store.get_or_404(Author, author_id, "Author not found")
    view = AuthorFormView(title="Update Author", action=url_for('catalog.author_update_post', author_id=author_id),
                          author=author)
    return render_template('author_form.html', view=view)


@catalog.post('/author/<int:author_id>/update')
def author_update_post(author_id):
    form = AuthorForm()
    author = _author_from_form(form, author_id)
    if not form.validate_on_submit():
        view = AuthorFormView(title="Update Author", action=url_for('catalog.author_update_post', author_id=author_id),
                              author=author, errors=form_errors(form), rejected=rejected_input(form))
        return render_template('author_form.html', view=view)

    updated = store.find_by_id_and_replace(Author, author_id, {
        'first_name': author.first_name,
        'family_name': author.family_name,
        'date_of_birth': author.date_of_birth,
        'date_of_death': author.date_of_death,
    }, "Author not found")
    return redirect(updated.url)


@catalog.get('/author/<int:author_id>/delete')
def author_delete_get(author_id):
    return _not_implemented("Author delete GET")


@catalog.post('/author/<int:author_id>/delete')
def author_delete_post(author_id):
    return _not_implemented("Author delete POST")


# -----------------------
# Genres
# -----------------------
@catalog.get('/genres')
def genre_list():
    genres = store.find(Genre, order_by=Genre.name.asc())
    return render_template('genre_list.html', view=GenreListView(title="Genre List", genres=genres))


@catalog.get('/genre/<int:genre_id>')
def genre_detail(genre_id):
    results = parallel(
        genre=lambda: store.find_by_id(Genre, genre_id),
        books=lambda: store.find(Book, Book.genres.any(Genre.id == genre_id), order_by=Book.title),
    )
    if results['genre'] is None:
        raise RecordNotFound("Genre not found")
    return render_template('genre_detail.html', view=GenreDetailView(title="Genre Detail", **results))


@catalog.get('/genre/create')
def genre_create_get():
    view = GenreFormView(title="Create Genre", action=url_for('catalog.genre_create_post'))
    return render_template('genre_form.html', view=view)


@catalog.post('/genre/create')
def genre_create_post():
    form = GenreForm()
    genre = Genre(name=form.name.data)
    if not form.validate_on_submit():
        view = GenreFormView(title="Create Genre", action=url_for('catalog.genre_create_post'),
                             genre=genre, errors=form_errors(form))
        return render_template('genre_form.html', view=view)

    found = store.find_one(Genre, Genre.name == genre.name)
    if found is not None:
        logger.info("genre %r already exists as %s", genre.name, found.id)
        return redirect(found.url)

    try:
        store.save(genre)
    except IntegrityError:
        # lost the race against a concurrent insert of the same name
        found = store.find_one(Genre, Genre.name == genre.name)
        if found is None:
            raise
        logger.info("genre %r inserted concurrently as %s", genre.name, found.id)
        return redirect(found.url)
    return redirect(genre.url)


@catalog.get('/genre/<int:genre_id>/update')
def genre_update_get(genre_id):
    genre = store.get_or_404(Genre, genre_id, "Genre not found")
    view = GenreFormView(title="Update Genre", action=url_for('catalog.genre_update_post', genre_id=genre_id),
                         genre=genre)
    return render_template('genre_form.html', view=view)


@catalog.post('/genre/<int:genre_id>/update')
def genre_update_post(genre_id):
    form = GenreForm()
    genre = Genre(id=genre_id, name=form.name.data)
    action = url_for('catalog.genre_update_post', genre_id=genre_id)
    errors = form_errors(form) if not form.validate_on_submit() else []

    if not errors and store.find_one(Genre, Genre.name == genre.name, Genre.id != genre_id) is not None:
        errors.append(FieldError('name', "Genre with this name already exists"))
    if errors:
        view = GenreFormView(title="Update Genre", action=action, genre=genre, errors=errors)
        return render_template('genre_form.html', view=view)

    updated = store.find_by_id_and_replace(Genre, genre_id, {'name': genre.name}, "Genre not found")
    return redirect(updated.url)


@catalog.get('/genre/<int:genre_id>/delete')
def genre_delete_get(genre_id):
    return _not_implemented("Genre delete GET")


@catalog.post('/genre/<int:genre_id>/delete')
def genre_delete_post(genre_id):
    return _not_implemented("Genre delete POST")


# -----------------------
# Book copies
# -----------------------
def _book_instance_form_view(title, action, books, book_instance=None, selected_book=None,
                             status='Maintenance', errors=None, rejected=None):
    return BookInstanceFormView(
        title=title,
        action=action,
        books=checked_options(books, [selected_book], label=lambda b: b.title),
        statuses=status_options(status, BOOK_STATUSES),
        book_instance=book_instance,
        errors=errors or [],
        rejected=rejected or {},
    )


def _book_instance_from_form(form, instance_id=None):
    return BookInstance(
        id=instance_id,
        book_id=form.book.data,
        imprint=form.imprint.data,
        due_back=form.due_back.data,
        status=form.status.data,
    )


@catalog.get('/bookinstances')
def bookinstance_list():
    instances = store.find(BookInstance, order_by=BookInstance.id)
    view = BookInstanceListView(title="Book Instance List", book_instances=instances)
    return render_template('bookinstance_list.html', view=view)


@catalog.get('/bookinstance/<int:instance_id>')
def bookinstance_detail(instance_id):
    instance = store.get_or_404(BookInstance, instance_id, "Book copy not found")
    view = BookInstanceDetailView(title=f"Copy: {instance.book.title}", book_instance=instance)
    return render_template('bookinstance_detail.html', view=view)


@catalog.get('/bookinstance/create')
def bookinstance_create_get():
    books = store.find(Book, order_by=Book.title)
    view = _book_instance_form_view("Create BookInstance", url_for('catalog.bookinstance_create_post'), books)
    return render_template('bookinstance_form.html', view=view)


@catalog.post('/bookinstance/create')
def bookinstance_create_post():
    form = BookInstanceForm()
    instance = _book_instance_from_form(form)
    if not form.validate_on_submit():
        books = store.find(Book, order_by=Book.title)
        view = _book_instance_form_view("Create BookInstance", url_for('catalog.bookinstance_create_post'), books,
                                        book_instance=instance, selected_book=form.book.data,
                                        status=form.status.data, errors=form_errors(form), rejected=rejected_input(form))
        return render_template('bookinstance_form.html', view=view)

    if instance.due_back is None:
        instance.due_back = date.today()
    store.save(instance)
    return redirect(instance.url)


@catalog.get('/bookinstance/<int:instance_id>/update')
def bookinstance_update_get(instance_id):
    results = parallel(
        book_instance=lambda: store.find_by_id(BookInstance, instance_id),
        books=lambda: store.find(Book, order_by=Book.title),
    )
    instance = results['book_instance']
    if instance is None:
        raise RecordNotFound("Book copy not found")
    view = _book_instance_form_view("Update BookInstance",
                                    url_for('catalog.bookinstance_update_post', instance_id=instance_id),
                                    results['books'], book_instance=instance,
                                    selected_book=instance.book_id, status=instance.status)
    return render_template('bookinstance_form.html', view=view)


@catalog.post('/bookinstance/<int:instance_id>/update')
def bookinstance_update_post(instance_id):
    form = BookInstanceForm()
    instance = _book_instance_from_form(form, instance_id)
    action = url_for('catalog.bookinstance_update_post', instance_id=instance_id)
    if not form.validate_on_submit():
        books = store.find(Book, order_by=Book.title)
        view = _book_instance_form_view("Update BookInstance", action, books, book_instance=instance,
                                        selected_book=form.book.data, status=form.status.data,
                                        errors=form_errors(form), rejected=rejected_input(form))
        return render_template('bookinstance_form.html', view=view)

    updated = store.find_by_id_and_replace(BookInstance, instance_id, {
        'book_id': instance.book_id,
        'imprint': instance.imprint,
        'due_back': instance.due_back,
        'status': instance.status,
    }, "Book copy not found")
    return redirect(updated.url)


@catalog.get('/bookinstance/<int:instance_id>/delete')
def bookinstance_delete_get(instance_id):
    return _not_implemented("BookInstance delete GET")


@catalog.post('/bookinstance/<int:instance_id>/delete')
def bookinstance_delete_post(instance_id):
    return _not_implemented("BookInstance delete POST")
