# backend/remitos/core/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.engine import make_url

from .config import DATABASE_URL


def build_engine(dsn: str):
    url = make_url(dsn)
    engine_kwargs = dict(pool_pre_ping=True)

    # Dialect specific settings
    backend = url.get_backend_name()  # e.g. 'sqlite', 'postgresql'
    if backend.startswith("sqlite"):
        # FastAPI serves requests from a thread pool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(pool_size=5, max_overflow=10)

    return create_engine(dsn, **engine_kwargs)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()
