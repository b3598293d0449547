# backend/remitos/schemas/product.py
from typing import Optional
from pydantic import BaseModel, field_validator


class ProductCreate(BaseModel):
    description: str
    code: Optional[str] = None


class ProductRename(BaseModel):
    description: str


class CodeIn(BaseModel):
    code: str

    # numeric barcodes posted as JSON numbers
    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v
