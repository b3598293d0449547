# backend/remitos/core/deps.py
"""Process-wide store and document service, handed to routers via Depends."""
from __future__ import annotations
import threading
from typing import Optional

from .config import DATA_FILE, PDF_DIR, STORAGE_BACKEND
from ..services.document_service import DocumentService, FileDocumentStore, PdfNoteRenderer
from ..services.storage import build_repository
from ..services.store import Store

_lock = threading.Lock()
_store: Optional[Store] = None
_documents: Optional[DocumentService] = None


def get_store() -> Store:
    global _store
    if _store is None:
        with _lock:
            if _store is None:
                _store = Store.open(build_repository(STORAGE_BACKEND, data_file=DATA_FILE))
    return _store


def get_documents() -> DocumentService:
    global _documents
    if _documents is None:
        with _lock:
            if _documents is None:
                _documents = DocumentService(PdfNoteRenderer(), FileDocumentStore(PDF_DIR))
    return _documents
