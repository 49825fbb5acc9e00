"""
Database schema and connection management.

Uses SQLite with SQLAlchemy as a keyed value store for persisted state.
One engine is kept per database file and reused by every session.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict
from sqlalchemy import create_engine, Column, String, Text, DateTime
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

_engines: Dict[str, Engine] = {}


class StoredValue(Base):
    """One persisted key (e.g. the selected team)."""

    __tablename__ = "stored_values"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def get_engine(db_path: Path) -> Engine:
    """Return the cached engine for a database file, creating it on first use."""
    key = str(Path(db_path).resolve())
    engine = _engines.get(key)
    if engine is None:
        engine = create_engine(f"sqlite:///{key}")
        _engines[key] = engine
    return engine


def dispose_engines() -> None:
    """Close pooled connections of every cached engine."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(get_engine(db_path))


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=get_engine(db_path))
    return Session()
