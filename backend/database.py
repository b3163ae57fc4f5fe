"""
SQLite persistence for saved form state, using SQLAlchemy 2.0.
Database file defaults to ./data/ccu-rounder.db relative to the working directory;
override with the CCU_ROUNDER_DB_PATH environment variable.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, String, Text, DateTime
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class FormSlot(Base):
    """
    Last-known form state, one row per tool.
    Value is the JSON-serialised input record.
    """
    __tablename__ = "form_slots"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<FormSlot(id={self.id}, key='{self.key}')>"


def get_database_path() -> Path:
    """Get the database file path, creating its directory if needed."""
    path = Path(os.environ.get("CCU_ROUNDER_DB_PATH", "./data/ccu-rounder.db"))
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_db_engine(url: Optional[str] = None) -> Engine:
    """Create the engine and make sure the tables exist."""
    url = url or f"sqlite:///{get_database_path()}"
    extra = {}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory DB lives in one connection; all threads must share it
        extra["poolclass"] = StaticPool
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},  # Required for SQLite with FastAPI
        echo=False,
        **extra,
    )
    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
