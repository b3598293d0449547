# backend/remitos/services/note_service.py
"""
Delivery note reconciliation.

A note's status is not a stored state machine: it is recomputed from the
line items after every scan / override, with one terminal override
(closed with action "discrepancy").

    all items received == expected  -> ok
    any item received  >  expected  -> discrepancy
    otherwise                       -> pending
"""
from __future__ import annotations
import logging
import re
from datetime import date as date_cls, datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote

from ..core.errors import (
    BranchNotFound,
    EmptyCode,
    EmptyDescription,
    EmptyItems,
    InvalidAction,
    InvalidIndex,
    InvalidQuantity,
    NoteNotFound,
    NotFullyMatched,
    NotInNote,
    UnknownCode,
)
from ..domain.constants import (
    CLOSE_ACTIONS,
    COUNTER_NOTE_NUMBER,
    DEFAULT_ORIGIN,
    PUBLIC_URL,
    SHARE_TEXT,
    STATUS_DISCREPANCY,
    STATUS_OK,
    STATUS_PENDING,
    WHATSAPP_BASE,
    WHATSAPP_PREFIX,
)
from ..domain.entities import DeliveryNote, LineItem, Snapshot
from ..domain.normalize import clean_text, normalize_text
from ..domain.results import LineUpdate
from .document_service import DocumentService
from .store import Store, next_id

logger = logging.getLogger(__name__)


# ---- status ----
def derive_status(items: Iterable[LineItem]) -> str:
    items = list(items)
    if all(it.received == it.expected for it in items):
        return STATUS_OK
    if any(it.received > it.expected for it in items):
        return STATUS_DISCREPANCY
    return STATUS_PENDING


def effective_status(note: DeliveryNote) -> str:
    if note.closed == STATUS_DISCREPANCY:
        return STATUS_DISCREPANCY
    return derive_status(note.items)


def is_fully_matched(items: Iterable[LineItem]) -> bool:
    return all(it.received == it.expected for it in items)


# ---- helpers ----
def _find_note(state: Snapshot, note_id: int) -> DeliveryNote:
    note = next((n for n in state.notes if n.id == note_id), None)
    if not note:
        raise NoteNotFound(f"Delivery note {note_id} not found.")
    return note


def _is_quantity(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _build_items(items: Iterable[Any]) -> List[LineItem]:
    out: List[LineItem] = []
    for pos, raw in enumerate(items, start=1):
        data: Mapping = raw if isinstance(raw, Mapping) else raw.model_dump()
        description = clean_text(data.get("description"))
        expected = data.get("expected", data.get("qty"))
        if not description:
            raise EmptyDescription(f"Item {pos} has no description.")
        if not _is_quantity(expected):
            raise InvalidQuantity(f"Item {pos} ({description}): quantity must be a non-negative integer.")
        out.append(LineItem(description=description, expected=expected, received=0))
    return out


def _line_update(note: DeliveryNote, index: int) -> LineUpdate:
    it = note.items[index]
    return LineUpdate(
        index=index,
        description=it.description,
        expected=it.expected,
        received=it.received,
        status=note.status,
    )


def attach_document(store: Store, note_id: int, documents: DocumentService) -> DeliveryNote:
    # rendering happens outside the store lock
    ref = documents.publish(store.notes[note_id])
    with store.mutate() as state:
        note = _find_note(state, note_id)
        note.document = ref
    return note


# ---- reads ----
def get_note(store: Store, note_id: int) -> DeliveryNote:
    note = store.notes.get(note_id)
    if not note:
        raise NoteNotFound(f"Delivery note {note_id} not found.")
    return note


def list_notes(
    store: Store, *, branch_id: Optional[int] = None, status: Optional[str] = None
) -> List[DeliveryNote]:
    rows = store.snapshot().notes
    if branch_id is not None:
        rows = [n for n in rows if n.branch.id == branch_id]
    if status:
        rows = [n for n in rows if n.status == status]
    return sorted(rows, key=lambda n: n.id, reverse=True)


# ---- lifecycle ----
def create_note(
    store: Store,
    *,
    branch_id: int,
    items: Iterable[Any],
    origin: Optional[str] = None,
    date: Optional[str] = None,
    order_id: Optional[int] = None,
    documents: Optional[DocumentService] = None,
) -> DeliveryNote:
    line_items = _build_items(items or [])
    if not line_items:
        raise EmptyItems()

    with store.mutate() as state:
        branch = next((b for b in state.branches if b.id == branch_id), None)
        if not branch:
            raise BranchNotFound(f"Branch {branch_id} not found.")

        number = store.allocate(COUNTER_NOTE_NUMBER)
        note_id = next_id(state.notes)
        note = DeliveryNote(
            id=note_id,
            number=number,
            date=clean_text(date) or date_cls.today().isoformat(),
            origin=clean_text(origin) or DEFAULT_ORIGIN,
            branch=branch.snapshot(),
            items=line_items,
            status=STATUS_PENDING,
            public_url=PUBLIC_URL.format(note_id),
            order_id=order_id,
            created_at=datetime.now(timezone.utc),
        )
        state.notes.append(note)

    logger.info("note created (id=%s, number=%s, branch=%s, items=%d)", note.id, number, branch_id, len(line_items))
    if documents is not None:
        note = attach_document(store, note.id, documents)
    return note


def scan(store: Store, note_id: int, code: str) -> LineUpdate:
    """
    One unit received. The scanned code resolves to a product; the first line
    whose normalized description equals the product's gets received += 1,
    capped at the expected quantity.
    """
    code = clean_text(code)
    with store.mutate() as state:
        note = _find_note(state, note_id)
        if not code:
            raise EmptyCode()

        product = store.catalog.resolve(code=code)
        if product is None:
            raise UnknownCode(f"Code '{code}' not found.")

        key = normalize_text(product.description)
        idx = next((i for i, it in enumerate(note.items) if normalize_text(it.description) == key), None)
        if idx is None:
            raise NotInNote(f"'{product.description}' is not listed in note {note.number}.")

        it = note.items[idx]
        it.received = min(it.expected, it.received + 1)
        note.status = effective_status(note)
        result = _line_update(note, idx)

    logger.debug("scan note=%s code=%s -> line %s (%s/%s)", note_id, code, idx, result.received, result.expected)
    return result


def set_received(store: Store, note_id: int, index: int, value: int) -> LineUpdate:
    """Manual correction; no cap, so received > expected is possible here."""
    with store.mutate() as state:
        note = _find_note(state, note_id)
        if not isinstance(index, int) or index < 0 or index >= len(note.items):
            raise InvalidIndex(f"Line {index} does not exist in note {note.number} ({len(note.items)} lines).")
        if not _is_quantity(value):
            raise InvalidQuantity("Received quantity must be a non-negative integer.")

        note.items[index].received = value
        note.status = effective_status(note)
        result = _line_update(note, index)

    logger.info("note %s line %s set to %s (status=%s)", note_id, index, value, result.status)
    return result


def close_note(
    store: Store,
    note_id: int,
    *,
    action: str,
    comment: Optional[str] = None,
    documents: Optional[DocumentService] = None,
) -> DeliveryNote:
    with store.mutate() as state:
        note = _find_note(state, note_id)
        if action == STATUS_OK:
            if not is_fully_matched(note.items):
                raise NotFullyMatched()
            note.closed = STATUS_OK
            note.comment = None
        elif action == STATUS_DISCREPANCY:
            note.closed = STATUS_DISCREPANCY
            note.comment = clean_text(comment) or None
        else:
            raise InvalidAction(f"Invalid action {action!r}; expected one of {', '.join(CLOSE_ACTIONS)}.")
        note.status = effective_status(note)

    logger.info("note %s closed as %s", note_id, note.status)
    if documents is not None:
        note = attach_document(store, note.id, documents)
    return note


# ---- public receipt page ----
def share_links(note: DeliveryNote, base_url: str) -> dict:
    public_url = base_url.rstrip("/") + note.public_url
    text = SHARE_TEXT.format(note.number, public_url)
    digits = re.sub(r"\D", "", note.branch.phone or "")
    wa_base = f"{WHATSAPP_BASE}{WHATSAPP_PREFIX}{digits}" if digits else WHATSAPP_BASE
    return {
        "public_url": public_url,
        "share_text": text,
        "whatsapp_url": f"{wa_base}?text={quote(text, safe='')}",
    }


def public_view(store: Store, note_id: int, base_url: str) -> dict:
    note = get_note(store, note_id)
    return {
        "id": note.id,
        "number": note.number,
        "date": note.date,
        "origin": note.origin,
        "branch": note.branch.model_dump(),
        "status": note.status,
        "comment": note.comment,
        "document": note.document,
        "items": [
            {"index": i, **it.model_dump()}
            for i, it in enumerate(note.items)
        ],
        **share_links(note, base_url),
    }
