# backend/remitos/schemas/note.py
import datetime as dt
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class NoteItemIn(BaseModel):
    description: str = ""
    # older clients send "qty"
    expected: int = Field(validation_alias=AliasChoices("expected", "qty"))


class NoteCreate(BaseModel):
    branch_id: int
    origin: Optional[str] = None
    date: Optional[dt.date] = None
    items: List[NoteItemIn] = []

    @model_validator(mode="before")
    @classmethod
    def _branch_object(cls, data):
        # {"branch": {"id": 3, ...}} is accepted in place of branch_id
        if isinstance(data, dict) and "branch_id" not in data:
            branch = data.get("branch")
            if isinstance(branch, dict) and "id" in branch:
                data = {**data, "branch_id": branch["id"]}
        return data


class ScanIn(BaseModel):
    code: str

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class ReceivedIn(BaseModel):
    value: int


class CloseIn(BaseModel):
    # validated by the service so an unknown action maps to invalid_action
    action: str
    comment: Optional[str] = Field(default=None, validation_alias=AliasChoices("comment", "note"))
