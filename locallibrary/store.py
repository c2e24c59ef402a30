"""Persistence helpers used by the catalog handlers.

Thin wrappers over the Flask-SQLAlchemy session. Store failures
(``SQLAlchemyError``) are never caught here beyond rolling the session back;
they propagate to the app's error handlers.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from . import db
from .errors import RecordNotFound

logger = logging.getLogger(__name__)


def find(model, *criteria, order_by=None):
    query = model.query.filter(*criteria)
    if order_by is not None:
        query = query.order_by(order_by)
    return query.all()


def find_one(model, *criteria):
    return model.query.filter(*criteria).first()


def find_by_id(model, ident):
    return db.session.get(model, ident)


def get_or_404(model, ident, message):
    """Like ``find_by_id`` but raises ``RecordNotFound`` for a missing row."""
    entity = find_by_id(model, ident)
    if entity is None:
        raise RecordNotFound(message)
    return entity


def count(model, *criteria):
    return model.query.filter(*criteria).count()


def commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def save(entity):
    db.session.add(entity)
    commit()
    logger.info("created %s %s", type(entity).__name__, entity.id)
    return entity


def find_by_id_and_replace(model, ident, values, message):
    """Overwrite every attribute in ``values`` on the stored row and commit."""
    entity = get_or_404(model, ident, message)
    for key, value in values.items():
        setattr(entity, key, value)
    commit()
    logger.info("updated %s %s", model.__name__, ident)
    return entity
