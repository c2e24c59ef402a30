from datetime import datetime
from typing import List, NamedTuple

import bleach
from dateutil.parser import parse as dateparse
from flask_wtf import FlaskForm
from wtforms import DateField, SelectField, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional, Regexp, ValidationError

from .models import BOOK_STATUSES


class FieldError(NamedTuple):
    field: str
    message: str


def as_list(value):
    """Coerce a multi-select value to a list: None -> [], scalar -> [value]."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def sanitize(value):
    """Trim and escape a submitted string; other values pass through.

    bleach with no allowed tags escapes markup rather than stripping it.
    Quotes are encoded as well so stored text is safe inside attributes.
    """
    if isinstance(value, str):
        cleaned = bleach.clean(value.strip(), tags=set(), strip=False)
        return cleaned.replace('"', "&quot;").replace("'", "&#x27;")
    return value


def to_int(value):
    if value in (None, ""):
        return None
    return int(value)


def form_errors(form) -> List[FieldError]:
    """Flatten form errors into an ordered list; empty means the form is valid."""
    return [
        FieldError(name or "form", message)
        for name, messages in form.errors.items()
        for message in messages
    ]


def rejected_input(form):
    """Raw text of date fields that failed to parse, keyed by field name.

    A re-rendered form echoes these back since the parsed value is None.
    """
    return {
        name: field.raw_data[0]
        for name, field in form._fields.items()
        if isinstance(field, FlexibleDateField) and field.errors and field.raw_data
    }


def parse_date(date_str: str):
    """Parse yyyy-mm-dd or yyyymmdd, falling back to dateutil for other formats."""
    if not date_str:
        raise ValueError("Empty date")
    s = date_str.strip()
    for fmt in ("%Y-%m-%d", "%Y%m%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    try:
        return dateparse(s).date()
    except (ValueError, OverflowError):
        raise ValueError("Invalid date format; expected YYYY-MM-DD or yyyymmdd")


class FlexibleDateField(DateField):
    """Optional date input that accepts the formats understood by ``parse_date``."""

    def __init__(self, label=None, validators=None, invalid_message="Invalid date", **kwargs):
        super().__init__(label, validators, **kwargs)
        self.invalid_message = invalid_message

    def process_formdata(self, valuelist):
        if not valuelist or not valuelist[0].strip():
            self.data = None
            return
        try:
            self.data = parse_date(valuelist[0])
        except ValueError:
            self.data = None
            raise ValueError(self.invalid_message)


class MultiSelectField(SelectMultipleField):
    """Multi-select whose data is always a list, whatever the input shape."""

    def process_data(self, value):
        super().process_data(as_list(value))

    def process_formdata(self, valuelist):
        super().process_formdata(as_list(valuelist))


# -----------------------
# Forms
# -----------------------
class BookForm(FlaskForm):
    title = StringField("Title", filters=[sanitize], validators=[DataRequired("Title must not be empty"), Length(max=500)])
    author = SelectField("Author", coerce=to_int, validate_choice=False,
                         validators=[DataRequired("Author must not be empty")])
    summary = TextAreaField("Summary", filters=[sanitize], validators=[DataRequired("Summary must not be empty")])
    isbn = StringField("ISBN", filters=[sanitize], validators=[DataRequired("ISBN must not be empty"), Length(max=50)])
    genre = MultiSelectField("Genre", coerce=int, validate_choice=False)


_NAME_CHARS = r'^[A-Za-z0-9]*$'


class AuthorForm(FlaskForm):
    first_name = StringField("First Name", filters=[sanitize], validators=[
        DataRequired("First name must be specified."),
        Length(max=100),
        Regexp(_NAME_CHARS, message="First name has non-alphanumeric characters."),
    ])
    family_name = StringField("Family Name", filters=[sanitize], validators=[
        DataRequired("Family name must be specified."),
        Length(max=100),
        Regexp(_NAME_CHARS, message="Family name has non-alphanumeric characters."),
    ])
    date_of_birth = FlexibleDateField("Date of birth", validators=[Optional()], invalid_message="Invalid date of birth")
    date_of_death = FlexibleDateField("Date of death", validators=[Optional()], invalid_message="Invalid date of death")

    def validate_date_of_death(form, field):
        if field.data and form.date_of_birth.data and field.data < form.date_of_birth.data:
            raise ValidationError("Date of death must not be before date of birth")


class GenreForm(FlaskForm):
    name = StringField("Genre", filters=[sanitize], validators=[DataRequired("Genre name required"), Length(max=100)])


class BookInstanceForm(FlaskForm):
    book = SelectField("Book", coerce=to_int, validate_choice=False,
                       validators=[DataRequired("Book must be specified")])
    imprint = StringField("Imprint", filters=[sanitize], validators=[DataRequired("Imprint must be specified"), Length(max=500)])
    due_back = FlexibleDateField("Date when book available", validators=[Optional()])
    status = SelectField("Status", choices=[(s, s) for s in BOOK_STATUSES], default='Maintenance',
                         validate_choice=False, filters=[sanitize])

    def validate_status(form, field):
        if field.data not in BOOK_STATUSES:
            raise ValidationError("Invalid status")
