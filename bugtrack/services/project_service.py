"""
Project Service — create and list projects.
"""

from bugtrack.models import db
from bugtrack.models.project import Project


def create_project(*, name, description="", owner_id=None) -> Project:
    project = Project(name=name, description=description or "", owner_id=owner_id)
    db.session.add(project)
    db.session.commit()
    return project


def list_projects() -> list[Project]:
    return Project.query.order_by(Project.id).all()
