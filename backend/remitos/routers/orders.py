# backend/remitos/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.api import list_meta, ok
from ..core.deps import get_documents, get_store
from ..schemas.order import OrderCreate
from ..services import order_service
from ..services.document_service import DocumentService
from ..services.store import Store

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("")
def list_orders(
    status: Optional[str] = Query(None, description="draft | processed"),
    store: Store = Depends(get_store),
):
    rows = order_service.list_orders(store, status=status)
    return ok(rows, meta=list_meta(rows))


@router.post("", status_code=201)
def submit_order(payload: OrderCreate, store: Store = Depends(get_store)):
    order = order_service.submit_order(
        store,
        rows=payload.rows,
        origin=payload.origin,
        date=payload.date.isoformat() if payload.date else None,
    )
    return ok(order, status_code=201)


@router.get("/{order_id}")
def get_order(order_id: int, store: Store = Depends(get_store)):
    return ok(order_service.get_order(store, order_id))


@router.post("/{order_id}/generate")
def generate_notes(
    order_id: int,
    store: Store = Depends(get_store),
    documents: DocumentService = Depends(get_documents),
):
    result = order_service.generate_notes(store, order_id, documents=documents)
    # partial success is still a 200; failures are listed per branch
    return ok(result, meta={"created": len(result.note_ids), "failed": len(result.failures)})
