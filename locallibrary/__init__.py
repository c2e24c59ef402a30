"""
Local library catalog.

Server-rendered Flask application for books, authors, genres and book copies:
- list / detail / create / update pages for every resource under /catalog
- WTForms validation with escaped input and re-render on error
- independent reads of one page are fetched concurrently
"""

import logging

from flask import Flask, redirect, url_for
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect

from .config import Config

db = SQLAlchemy()
csrf = CSRFProtect()


def configure_logging(app):
    level = app.config.get('LOG_LEVEL', 'INFO')
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).setLevel(level)
    app.logger.setLevel(level)


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    configure_logging(app)
    db.init_app(app)
    csrf.init_app(app)

    from . import models  # noqa: F401  (register tables)
    from .catalog import catalog
    from .cli import register_commands
    from .errors import register_error_handlers

    app.register_blueprint(catalog, url_prefix='/catalog')
    register_error_handlers(app)
    register_commands(app)

    @app.route('/')
    def home():
        return redirect(url_for('catalog.index'))

    return app
