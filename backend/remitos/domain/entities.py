# backend/remitos/domain/entities.py
"""In-memory entities and the aggregate snapshot.

Defaults for missing or legacy fields are applied here, once, when data
enters the core (API payloads go through schemas first, persisted data goes
through ``Snapshot.model_validate``). Business code can rely on every field
being present and typed.

Persisted snapshots written by the first version of the service
(``remitos``/``numero``/``fecha``/``qty`` keys, Spanish status values) are
migrated on load.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import COUNTER_NOTE_NUMBER, COUNTER_SEEDS
from .normalize import clean_text, to_int

NoteStatus = Literal["pending", "ok", "discrepancy"]
CloseAction = Literal["ok", "discrepancy"]
OrderStatus = Literal["draft", "processed"]

_LEGACY_STATUS = {"pendiente": "pending", "diferencias": "discrepancy"}


def _rename(data: Any, mapping: Dict[str, str]) -> Any:
    if not isinstance(data, dict):
        return data
    out = dict(data)
    for old, new in mapping.items():
        if old in out and new not in out:
            out[new] = out.pop(old)
    return out


class BranchSnapshot(BaseModel):
    """Destination fields copied into a note at creation time."""
    id: int
    name: str = ""
    address: str = ""
    phone: Optional[str] = None

    @field_validator("name", "address", mode="before")
    @classmethod
    def _text(cls, v):
        return clean_text(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, v):
        return clean_text(v) or None


class Branch(BranchSnapshot):

    def snapshot(self) -> BranchSnapshot:
        return BranchSnapshot(**self.model_dump())


class Product(BaseModel):
    id: int
    description: str = ""
    codes: List[str] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return clean_text(v)

    @field_validator("codes", mode="before")
    @classmethod
    def _codes(cls, v):
        if not isinstance(v, (list, tuple)):
            return []
        return [c for c in (clean_text(x) for x in v) if c]


class LineItem(BaseModel):
    description: str = ""
    expected: int = 0
    received: int = 0

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data):
        return _rename(data, {"qty": "expected"})

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return clean_text(v)

    @field_validator("expected", "received", mode="before")
    @classmethod
    def _quantity(cls, v):
        return to_int(v)


class DeliveryNote(BaseModel):
    id: int
    number: int
    date: str
    origin: str = ""
    branch: BranchSnapshot
    items: List[LineItem] = Field(default_factory=list)
    status: NoteStatus = "pending"
    comment: Optional[str] = None
    closed: Optional[CloseAction] = None
    document: Optional[str] = None
    public_url: str = ""
    order_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data):
        data = _rename(data, {
            "numero": "number",
            "fecha": "date",
            "note": "comment",
            "pdf": "document",
            "publicUrl": "public_url",
        })
        if isinstance(data, dict):
            status = data.get("status") or "pending"
            data["status"] = _LEGACY_STATUS.get(status, status)
            if data.get("comment") == "":
                data["comment"] = None
        return data


class OrderRow(BaseModel):
    product_id: Optional[int] = None
    description: str = ""
    per_branch: Dict[int, int] = Field(default_factory=dict)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return clean_text(v)


class Order(BaseModel):
    id: int
    date: str
    origin: str = ""
    rows: List[OrderRow] = Field(default_factory=list)
    status: OrderStatus = "draft"
    note_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class Snapshot(BaseModel):
    """Everything the storage layer saves and loads, as one unit."""
    branches: List[Branch] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    notes: List[DeliveryNote] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)
    counters: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data):
        data = _rename(data, {"remitos": "notes"})
        if isinstance(data, dict):
            for key in ("branches", "products", "notes", "orders"):
                if data.get(key) is None:
                    data[key] = []
            # Branch ids were positional in the oldest files
            data["branches"] = [
                {**b, "id": b.get("id") or i + 1} if isinstance(b, dict) else b
                for i, b in enumerate(data["branches"])
            ]
            counters = dict(data.get("counters") or {})
            if "remito" in counters and COUNTER_NOTE_NUMBER not in counters:
                counters[COUNTER_NOTE_NUMBER] = counters.pop("remito")
            data["counters"] = counters
        return data

    @model_validator(mode="after")
    def _seed_counters(self):
        for name, seed in COUNTER_SEEDS.items():
            if not isinstance(self.counters.get(name), int):
                self.counters[name] = seed
        return self
