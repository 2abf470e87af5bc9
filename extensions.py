"""Flask extension instances.

Created unbound here and attached to the application in ``create_app`` so
models and services can import them without a circular dependency on app.py.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
