"""
Database Configuration
SQLAlchemy engine, session factory and declarative base
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from travel_expense.config.settings import settings


connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # Sessions are used from the threadpool and from background tasks
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Database session dependency

    Yields:
        Session: Database session closed after the request
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
