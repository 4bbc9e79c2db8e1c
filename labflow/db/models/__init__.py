"""SQLAlchemy ORM models"""

from labflow.db.models.task import Task

__all__ = ["Task"]
