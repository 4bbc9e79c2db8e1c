"""SQLAlchemy ORM model for tasks table"""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text

from labflow.db.base import Base


class Task(Base):
    """
    SQLAlchemy ORM model for the tasks table.

    Timestamps are stored as naive UTC values so that SQLite and PostgreSQL
    round-trip them identically.
    """
    __tablename__ = "tasks"

    # Primary key
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Task information
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(16), nullable=False, default="Medium", index=True)
    status = Column(String(16), nullable=False, default="Todo", index=True)
    due_date = Column(Date, nullable=True, index=True)

    # Soft delete flag
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at_utc = Column(DateTime(timezone=False), nullable=False, index=True)
    updated_at_utc = Column(DateTime(timezone=False), nullable=True)

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
