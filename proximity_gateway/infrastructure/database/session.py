"""Database engine and session factory for the location store"""

from functools import lru_cache
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from proximity_gateway.config import settings


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Pooled engine, created on first use; recycle after 1 hour to avoid stale connections"""
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Session factory shared by repositories; each query opens its own short session"""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
