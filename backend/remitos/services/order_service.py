# backend/remitos/services/order_service.py
"""
Multi-branch orders.

An order lists products with a quantity per destination branch; generating
it creates one independent delivery note per branch. The fan-out is best
effort: a branch whose note cannot be created is reported in the result and
does not undo the notes already created for other branches.
"""
from __future__ import annotations
import logging
from datetime import date as date_cls, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.errors import DocumentError, DomainError, NoValidRows, OrderNotFound
from ..domain.constants import COUNTER_ORDER_ID, DEFAULT_ORIGIN, ORDER_DRAFT, ORDER_PROCESSED
from ..domain.entities import Order, OrderRow
from ..domain.normalize import clean_text, normalize_text, to_int
from ..domain.results import BranchFailure, GenerateResult
from .document_service import DocumentService
from .note_service import attach_document, create_note
from .store import Store

logger = logging.getLogger(__name__)


def _positive(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def get_order(store: Store, order_id: int) -> Order:
    order = store.orders.get(order_id)
    if not order:
        raise OrderNotFound(f"Order {order_id} not found.")
    return order


def list_orders(store: Store, *, status: Optional[str] = None) -> List[Order]:
    rows = store.snapshot().orders
    if status:
        rows = [o for o in rows if o.status == status]
    return sorted(rows, key=lambda o: o.id, reverse=True)


def submit_order(
    store: Store,
    *,
    rows: Iterable[Any],
    origin: Optional[str] = None,
    date: Optional[str] = None,
) -> Order:
    """
    Each row resolves to a catalog product (by id, then by its raw
    description) for a canonical description; rows without a product keep
    their own text. Per-branch entries that are not positive or point to an
    unknown branch are dropped, and so are rows left without any entry.
    """
    with store.mutate() as state:
        known = {b.id for b in state.branches}
        kept: List[OrderRow] = []
        dropped = 0
        for raw in rows or []:
            data: Mapping = raw if isinstance(raw, Mapping) else raw.model_dump()
            product = store.catalog.resolve(
                product_id=data.get("product_id"),
                description=data.get("description"),
            )
            description = product.description if product else clean_text(data.get("description"))
            per_branch: Dict[int, int] = {}
            for bid, qty in (data.get("per_branch") or {}).items():
                bid = to_int(bid, -1)
                if bid in known and _positive(qty):
                    per_branch[bid] = qty
            if not description or not per_branch:
                dropped += 1
                continue
            kept.append(OrderRow(
                product_id=product.id if product else None,
                description=description,
                per_branch=per_branch,
            ))

        if not kept:
            raise NoValidRows()

        order = Order(
            id=store.allocate(COUNTER_ORDER_ID),
            date=clean_text(date) or date_cls.today().isoformat(),
            origin=clean_text(origin) or DEFAULT_ORIGIN,
            rows=kept,
            status=ORDER_DRAFT,
            created_at=datetime.now(timezone.utc),
        )
        state.orders.append(order)

    logger.info("order submitted (id=%s, rows=%d, dropped=%d)", order.id, len(kept), dropped)
    return order


def group_by_branch(order: Order) -> Dict[int, List[dict]]:
    """branch id -> note items; rows with the same description are merged."""
    groups: Dict[int, Dict[str, dict]] = {}
    for row in order.rows:
        for bid, qty in row.per_branch.items():
            if qty <= 0:
                continue
            lines = groups.setdefault(bid, {})
            key = normalize_text(row.description)
            if key in lines:
                lines[key]["expected"] += qty
            else:
                lines[key] = {"description": row.description, "expected": qty}
    return {bid: list(groups[bid].values()) for bid in sorted(groups)}


def generate_notes(
    store: Store, order_id: int, *, documents: Optional[DocumentService] = None
) -> GenerateResult:
    order = get_order(store, order_id)
    if order.status == ORDER_PROCESSED:
        # TODO: make this idempotent (return order.note_ids) once the product side decides
        logger.warning("order %s already processed; generating additional notes", order_id)

    result = GenerateResult(order_id=order_id)
    for bid, items in group_by_branch(order).items():
        try:
            note = create_note(
                store,
                branch_id=bid,
                items=items,
                origin=order.origin,
                date=order.date,
                order_id=order.id,
            )
        except DomainError as e:
            logger.warning("order %s: note for branch %s not created (%s)", order_id, bid, e.reason)
            result.failures.append(BranchFailure(branch_id=bid, reason=e.reason, error=str(e.detail)))
            continue
        result.note_ids.append(note.id)

        if documents is not None:
            try:
                attach_document(store, note.id, documents)
            except DocumentError as e:
                result.failures.append(BranchFailure(branch_id=bid, reason=e.reason, error=str(e.detail)))

    with store.mutate() as state:
        o = next(x for x in state.orders if x.id == order_id)
        o.status = ORDER_PROCESSED
        o.note_ids.extend(result.note_ids)

    logger.info(
        "order %s generated %d notes (%d failures)", order_id, len(result.note_ids), len(result.failures)
    )
    return result
