"""Database package"""

from labflow.db.base import Base
from labflow.db.session import SessionLocal, engine, get_db, init_db

__all__ = ["Base", "SessionLocal", "engine", "get_db", "init_db"]
