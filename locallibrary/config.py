import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    # SECURITY: set a secure random key in production via env var
    SECRET_KEY = os.environ.get('LOCALLIBRARY_SECRET') or 'change-this-secret-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or "sqlite:///" + os.path.join(BASE_DIR, "locallibrary.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound on threads used to run independent reads of one request
    FANOUT_MAX_WORKERS = int(os.environ.get('FANOUT_MAX_WORKERS') or 4)
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
