# backend/remitos/routers/notes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.api import list_meta, ok
from ..core.deps import get_documents, get_store
from ..schemas.note import CloseIn, NoteCreate, ReceivedIn, ScanIn
from ..services import note_service
from ..services.document_service import DocumentService
from ..services.store import Store

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("")
def list_notes(
    branch_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None, description="pending | ok | discrepancy"),
    store: Store = Depends(get_store),
):
    rows = note_service.list_notes(store, branch_id=branch_id, status=status)
    return ok(rows, meta=list_meta(rows))


@router.post("", status_code=201)
def create_note(
    payload: NoteCreate,
    store: Store = Depends(get_store),
    documents: DocumentService = Depends(get_documents),
):
    note = note_service.create_note(
        store,
        branch_id=payload.branch_id,
        items=payload.items,
        origin=payload.origin,
        date=payload.date.isoformat() if payload.date else None,
        documents=documents,
    )
    return ok(note, status_code=201)


@router.get("/{note_id}")
def get_note(note_id: int, store: Store = Depends(get_store)):
    return ok(note_service.get_note(store, note_id))


@router.post("/{note_id}/scan")
def scan(note_id: int, payload: ScanIn, store: Store = Depends(get_store)):
    return ok(note_service.scan(store, note_id, payload.code))


@router.put("/{note_id}/items/{index}/received")
def set_received(note_id: int, index: int, payload: ReceivedIn, store: Store = Depends(get_store)):
    return ok(note_service.set_received(store, note_id, index, payload.value))


@router.post("/{note_id}/close")
def close_note(
    note_id: int,
    payload: CloseIn,
    store: Store = Depends(get_store),
    documents: DocumentService = Depends(get_documents),
):
    note = note_service.close_note(
        store, note_id, action=payload.action, comment=payload.comment, documents=documents
    )
    return ok(note)
