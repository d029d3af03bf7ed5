"""
Database engine and session factory.

The engine is owned by the application lifespan (see main.py): it is built
once at startup, checked, and disposed on shutdown.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..config.settings import Settings

Base = declarative_base()


def build_engine(settings: Settings, **kwargs) -> Engine:
    """
    Create the SQLAlchemy engine for ``settings.DATABASE_URL``.

    Server databases get a bounded connection pool. SQLite connections are
    shared across the request threadpool, so same-thread checking is disabled.
    """
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(url, connect_args=connect_args, **kwargs)

    kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
