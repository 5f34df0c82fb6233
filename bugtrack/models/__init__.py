"""
Bug Tracker
Shared SQLAlchemy handle.

Every model module imports ``db`` from here; ``create_app`` binds it to
the Flask app and imports the model modules so metadata is complete.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
