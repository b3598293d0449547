# backend/remitos/domain/catalog.py
"""Lookup structures over the product list.

The product list is the only source of truth; the three maps below are
rebuilt from it after every committed mutation and never edited in place.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .constants import SEARCH_LIMIT_DEFAULT, SEARCH_LIMIT_MAX
from .entities import Product
from .normalize import clean_text, looks_like_code, normalize_text


def code_owner(products: Iterable[Product], code: str) -> Optional[Product]:
    """Full scan: the product currently holding ``code``, if any."""
    for p in products:
        if code in p.codes:
            return p
    return None


class CatalogIndex:
    def __init__(self, products: Iterable[Product] = ()):
        self.rebuild(products)

    def rebuild(self, products: Iterable[Product]) -> None:
        self.products: List[Product] = list(products)
        self.by_id: Dict[int, Product] = {}
        self.by_code: Dict[str, Product] = {}
        self.by_description: Dict[str, Product] = {}
        for p in self.products:
            self.by_id[p.id] = p
            for c in p.codes:
                self.by_code.setdefault(c, p)
            key = normalize_text(p.description)
            if key:
                # same description twice: first (oldest) product wins
                self.by_description.setdefault(key, p)

    def __len__(self) -> int:
        return len(self.products)

    def resolve(
        self,
        *,
        product_id: Optional[int] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Product]:
        """First hit wins: id, then code, then normalized description."""
        if product_id is not None and product_id in self.by_id:
            return self.by_id[product_id]
        code = clean_text(code)
        if code and code in self.by_code:
            return self.by_code[code]
        key = normalize_text(description)
        if key:
            return self.by_description.get(key)
        return None

    def search(self, q: Optional[str] = None, limit: int = SEARCH_LIMIT_DEFAULT) -> List[Product]:
        limit = min(max(1, int(limit)), SEARCH_LIMIT_MAX)
        raw = clean_text(q)
        if not raw:
            return self.products[:limit]

        qn = normalize_text(raw)
        hits = [
            p for p in self.products
            if (qn and qn in normalize_text(p.description)) or any(raw in c for c in p.codes)
        ]
        # a scanned barcode should surface its exact owner first
        if looks_like_code(raw):
            hits.sort(key=lambda p: 0 if raw in p.codes else 1)
        return hits[:limit]
