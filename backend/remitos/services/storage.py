# backend/remitos/services/storage.py
"""
Snapshot persistence.

The core only needs ``load() -> Snapshot | None`` and ``save(snapshot)``;
the whole aggregate is read once at startup and rewritten after every
committed mutation.
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy.orm import sessionmaker

from ..core.db import Base, SessionLocal
from ..domain.entities import Snapshot
from ..models import StoreSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_ROW_ID = 1


class SnapshotRepository(Protocol):
    def load(self) -> Optional[Snapshot]: ...
    def save(self, snapshot: Snapshot) -> None: ...


def dump_snapshot(snapshot: Snapshot) -> str:
    return snapshot.model_dump_json(indent=2)


# ---------- SQLAlchemy (default) ----------

class SqlSnapshotRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    @contextmanager
    def session_scope(self):
        """One-shot session (rollback on error)."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_schema(self) -> None:
        bind = self.session_factory.kw["bind"]
        Base.metadata.create_all(bind=bind, tables=[StoreSnapshot.__table__], checkfirst=True)

    def load(self) -> Optional[Snapshot]:
        with self.session_scope() as db:
            row = db.get(StoreSnapshot, SNAPSHOT_ROW_ID)
            if row is None:
                return None
            return Snapshot.model_validate(json.loads(row.Payload))

    def save(self, snapshot: Snapshot) -> None:
        payload = dump_snapshot(snapshot)
        with self.session_scope() as db:
            row = db.get(StoreSnapshot, SNAPSHOT_ROW_ID)
            if row is None:
                db.add(StoreSnapshot(SnapshotID=SNAPSHOT_ROW_ID, Payload=payload))
            else:
                row.Payload = payload
                row.SavedAt = datetime.now(timezone.utc).replace(tzinfo=None)


# ---------- JSON file (data.json layout of the first version) ----------

class JsonFileRepository:
    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[Snapshot]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as fh:
            return Snapshot.model_validate(json.load(fh))

    def save(self, snapshot: Snapshot) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        # write-then-rename so a crash never leaves a truncated file
        fd, tmp = tempfile.mkstemp(dir=directory, prefix=".data-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(dump_snapshot(snapshot))
            os.replace(tmp, self.path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


# ---------- In memory (tests, scripts) ----------

class MemoryRepository:
    def __init__(self, initial: Optional[Snapshot] = None):
        self.payload: Optional[str] = dump_snapshot(initial) if initial is not None else None
        self.saves = 0

    def load(self) -> Optional[Snapshot]:
        if self.payload is None:
            return None
        return Snapshot.model_validate(json.loads(self.payload))

    def save(self, snapshot: Snapshot) -> None:
        self.payload = dump_snapshot(snapshot)
        self.saves += 1


def build_repository(backend: str, *, data_file: str, session_factory: sessionmaker = SessionLocal):
    if backend == "json":
        logger.info("Snapshot storage: JSON file %s", data_file)
        return JsonFileRepository(data_file)
    if backend != "sql":
        raise RuntimeError(f"STORAGE_BACKEND must be 'sql' or 'json', got {backend!r}")
    repo = SqlSnapshotRepository(session_factory)
    repo.create_schema()
    logger.info("Snapshot storage: SQL table %s", StoreSnapshot.__tablename__)
    return repo
