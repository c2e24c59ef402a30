"""View-models handed to the templates, one per page.

Templates receive a single ``view`` object; persisted rows are never
annotated for presentation, selection state lives in ``Option``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .forms import FieldError


@dataclass(frozen=True)
class Option:
    id: Any
    label: str
    checked: bool = False


def checked_options(records, selected, label=lambda r: r.name, key=lambda r: r.id) -> List[Option]:
    """Project reference rows to options, marking the ones whose id is selected."""
    selected = set(selected or ())
    return [Option(key(r), label(r), key(r) in selected) for r in records]


@dataclass
class IndexView:
    title: str
    book_count: int
    book_instance_count: int
    book_instance_available_count: int
    author_count: int
    genre_count: int


# --- Books ---
@dataclass
class BookListView:
    title: str
    books: List[Any]


@dataclass
class BookDetailView:
    title: str
    book: Any
    book_instances: List[Any]


@dataclass
class BookFormView:
    title: str
    action: str
    authors: List[Option]
    genres: List[Option]
    book: Optional[Any] = None
    errors: List[FieldError] = field(default_factory=list)


# --- Authors ---
@dataclass
class AuthorListView:
    title: str
    authors: List[Any]


@dataclass
class AuthorDetailView:
    title: str
    author: Any
    books: List[Any]


@dataclass
class AuthorFormView:
    title: str
    action: str
    author: Optional[Any] = None
    errors: List[FieldError] = field(default_factory=list)
    rejected: Dict[str, str] = field(default_factory=dict)


# --- Genres ---
@dataclass
class GenreListView:
    title: str
    genres: List[Any]


@dataclass
class GenreDetailView:
    title: str
    genre: Any
    books: List[Any]


@dataclass
class GenreFormView:
    title: str
    action: str
    genre: Optional[Any] = None
    errors: List[FieldError] = field(default_factory=list)


# --- Book copies ---
@dataclass
class BookInstanceListView:
    title: str
    book_instances: List[Any]


@dataclass
class BookInstanceDetailView:
    title: str
    book_instance: Any


@dataclass
class BookInstanceFormView:
    title: str
    action: str
    books: List[Option]
    statuses: List[Option]
    book_instance: Optional[Any] = None
    errors: List[FieldError] = field(default_factory=list)
    rejected: Dict[str, str] = field(default_factory=dict)


def status_options(current: Optional[str], statuses: Iterable[str]) -> List[Option]:
    return [Option(s, s, s == current) for s in statuses]
