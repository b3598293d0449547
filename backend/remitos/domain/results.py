# backend/remitos/domain/results.py
from typing import List

from pydantic import BaseModel, Field

from .entities import NoteStatus


class LineUpdate(BaseModel):
    """Line snapshot returned by scan / set_received."""
    index: int
    description: str
    expected: int
    received: int
    status: NoteStatus


class BranchFailure(BaseModel):
    branch_id: int
    reason: str
    error: str


class GenerateResult(BaseModel):
    order_id: int
    note_ids: List[int] = Field(default_factory=list)
    failures: List[BranchFailure] = Field(default_factory=list)


class ImportSummary(BaseModel):
    total_rows: int = 0
    header_skipped: bool = False
    created: int = 0
    codes_added: int = 0
    duplicates_skipped: int = 0
    invalid_rows: int = 0
