import logging

from flask import render_template
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import NotFound

from . import db

logger = logging.getLogger(__name__)


class RecordNotFound(NotFound):
    """A lookup by id matched nothing."""

    def __init__(self, message):
        super().__init__(description=message)
        self.message = message


# -----------------------
# Error handlers
# -----------------------
def register_error_handlers(app):

    @app.errorhandler(404)
    def not_found(e):
        logger.info("not found: %s", e.description)
        message = e.message if isinstance(e, RecordNotFound) else "Not found"
        return render_template('error.html', title="Not Found", message=message, status=404), 404

    @app.errorhandler(SQLAlchemyError)
    def store_error(e):
        db.session.rollback()
        logger.exception("store error")
        return render_template('error.html', title="Error", message="Database error", status=500), 500
