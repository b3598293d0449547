# backend/remitos/schemas/order.py
import datetime as dt
from typing import Dict, List, Optional
from pydantic import BaseModel


class OrderRowIn(BaseModel):
    product_id: Optional[int] = None
    description: str = ""
    # branch id -> quantity; non-positive entries are dropped on submit
    per_branch: Dict[int, int] = {}


class OrderCreate(BaseModel):
    origin: Optional[str] = None
    date: Optional[dt.date] = None
    rows: List[OrderRowIn] = []
