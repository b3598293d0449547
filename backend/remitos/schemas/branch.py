# backend/remitos/schemas/branch.py
from typing import Optional
from pydantic import BaseModel, Field


class BranchIn(BaseModel):
    name: str = Field(max_length=200)
    address: Optional[str] = ""
    phone: Optional[str] = None
