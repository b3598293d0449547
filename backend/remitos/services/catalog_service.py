# backend/remitos/services/catalog_service.py
"""
Catalog operations.

Invariants kept on every mutation:
- a code belongs to at most one product, catalog-wide;
- a product holds at most CODE_CAP codes.

Validation runs against the working copy inside ``store.mutate()`` before
anything is touched, so a rejected call leaves the product list and the
lookup maps exactly as they were.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from ..core.errors import (
    CodeCapExceeded,
    DuplicateCode,
    EmptyCode,
    EmptyDescription,
    ProductNotFound,
    UnknownCode,
)
from ..domain.catalog import code_owner
from ..domain.constants import CODE_CAP, COUNTER_PRODUCT_ID, SEARCH_LIMIT_DEFAULT
from ..domain.entities import Product, Snapshot
from ..domain.normalize import clean_text
from .store import Store

logger = logging.getLogger(__name__)


def _find(products: List[Product], product_id: int) -> Optional[Product]:
    return next((p for p in products if p.id == product_id), None)


def _check_code_free(products: List[Product], code: str) -> None:
    owner = code_owner(products, code)
    if owner is not None:
        raise DuplicateCode(f"Code '{code}' is already linked to product {owner.id} ({owner.description}).")


# ---- rules on a working copy (shared with the bulk loader) ----
def _create_in(store: Store, state: Snapshot, *, description: str, code: str = "") -> Product:
    if not description:
        raise EmptyDescription()
    if code:
        _check_code_free(state.products, code)
    product = Product(id=store.allocate(COUNTER_PRODUCT_ID), description=description, codes=[code] if code else [])
    state.products.append(product)
    return product


def _add_code_in(state: Snapshot, product: Product, code: str) -> None:
    if not code:
        raise EmptyCode()
    _check_code_free(state.products, code)
    if len(product.codes) >= CODE_CAP:
        raise CodeCapExceeded(f"Product {product.id} already holds {CODE_CAP} codes.")
    product.codes.append(code)


# ---- reads ----
def get_product(store: Store, product_id: int) -> Product:
    p = store.catalog.by_id.get(product_id)
    if not p:
        raise ProductNotFound(f"Product {product_id} not found.")
    return p


def resolve_product(
    store: Store,
    *,
    product_id: Optional[int] = None,
    code: Optional[str] = None,
    description: Optional[str] = None,
) -> Optional[Product]:
    return store.catalog.resolve(product_id=product_id, code=code, description=description)


def find_by_code(store: Store, code: str) -> Product:
    code = clean_text(code)
    if not code:
        raise EmptyCode()
    p = store.catalog.resolve(code=code)
    if not p:
        raise UnknownCode(f"Code '{code}' not found.")
    return p


def search_products(store: Store, q: Optional[str] = None, limit: int = SEARCH_LIMIT_DEFAULT) -> List[Product]:
    return store.catalog.search(q, limit)


# ---- writes ----
def create_product(store: Store, *, description: str, code: Optional[str] = None) -> Product:
    description = clean_text(description)
    code = clean_text(code)
    with store.mutate() as state:
        product = _create_in(store, state, description=description, code=code)
    logger.info("product created (id=%s, code=%s)", product.id, code or "-")
    return product


def rename_product(store: Store, product_id: int, *, description: str) -> Product:
    description = clean_text(description)
    with store.mutate() as state:
        p = _find(state.products, product_id)
        if not p:
            raise ProductNotFound(f"Product {product_id} not found.")
        if not description:
            raise EmptyDescription()
        p.description = description
    return p


def add_code(store: Store, product_id: int, *, code: str) -> List[str]:
    code = clean_text(code)
    with store.mutate() as state:
        p = _find(state.products, product_id)
        if not p:
            raise ProductNotFound(f"Product {product_id} not found.")
        _add_code_in(state, p, code)
        codes = list(p.codes)
    logger.info("code %s linked to product %s", code, product_id)
    return codes


def remove_code(store: Store, product_id: int, *, code: str) -> List[str]:
    code = clean_text(code)
    with store.mutate() as state:
        p = _find(state.products, product_id)
        if not p:
            raise ProductNotFound(f"Product {product_id} not found.")
        p.codes = [c for c in p.codes if c != code]
        codes = list(p.codes)
    return codes


def delete_product(store: Store, product_id: int) -> int:
    with store.mutate() as state:
        if not _find(state.products, product_id):
            raise ProductNotFound(f"Product {product_id} not found.")
        state.products = [p for p in state.products if p.id != product_id]
    logger.info("product deleted (id=%s)", product_id)
    return 1
