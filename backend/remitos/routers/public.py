# backend/remitos/routers/public.py
"""Receipt page data for the link shared with the branch (no login)."""
from fastapi import APIRouter, Depends, Request

from ..core.api import ok
from ..core.config import PUBLIC_BASE_URL
from ..core.deps import get_store
from ..services.note_service import public_view
from ..services.store import Store

router = APIRouter(prefix="/r", tags=["public"])


@router.get("/{note_id}")
def public_note(note_id: int, request: Request, store: Store = Depends(get_store)):
    base_url = PUBLIC_BASE_URL or str(request.base_url)
    return ok(public_view(store, note_id, base_url))
