# backend/remitos/routers/products.py
import logging
from typing import Optional
from zipfile import BadZipFile

from fastapi import APIRouter, Depends, File, Query, UploadFile
from openpyxl.utils.exceptions import InvalidFileException

from ..core.api import list_meta, ok
from ..core.deps import get_store
from ..core.errors import ValidationError
from ..domain.constants import SEARCH_LIMIT_DEFAULT, SEARCH_LIMIT_MAX
from ..schemas.product import CodeIn, ProductCreate, ProductRename
from ..services import catalog_service
from ..services.import_service import import_product_rows, read_xlsx_rows
from ..services.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
def search_products(
    q: Optional[str] = Query(None, description="Description words or part of a code"),
    limit: int = Query(SEARCH_LIMIT_DEFAULT, ge=1, le=SEARCH_LIMIT_MAX),
    store: Store = Depends(get_store),
):
    rows = catalog_service.search_products(store, q, limit)
    return ok(rows, meta=list_meta(rows, {"q": q or "", "limit": limit}))


@router.post("", status_code=201)
def create_product(payload: ProductCreate, store: Store = Depends(get_store)):
    p = catalog_service.create_product(store, description=payload.description, code=payload.code)
    return ok(p, status_code=201)


@router.get("/by-code/{code}")
def find_by_code(code: str, store: Store = Depends(get_store)):
    return ok(catalog_service.find_by_code(store, code))


@router.get("/id/{product_id}")
def get_product(product_id: int, store: Store = Depends(get_store)):
    return ok(catalog_service.get_product(store, product_id))


@router.post("/import-xlsx")
def import_xlsx(file: UploadFile = File(...), store: Store = Depends(get_store)):
    try:
        rows = read_xlsx_rows(file.file)
    except (InvalidFileException, BadZipFile, KeyError, ValueError) as e:
        logger.warning("spreadsheet rejected (%s): %s", file.filename, e)
        raise ValidationError(f"Could not read spreadsheet '{file.filename}': {e}")
    summary = import_product_rows(store, rows)
    return ok(summary)


@router.put("/{product_id}")
def rename_product(product_id: int, payload: ProductRename, store: Store = Depends(get_store)):
    return ok(catalog_service.rename_product(store, product_id, description=payload.description))


@router.delete("/{product_id}")
def delete_product(product_id: int, store: Store = Depends(get_store)):
    return ok({"removed": catalog_service.delete_product(store, product_id)})


@router.post("/{product_id}/codes", status_code=201)
def add_code(product_id: int, payload: CodeIn, store: Store = Depends(get_store)):
    codes = catalog_service.add_code(store, product_id, code=payload.code)
    return ok({"id": product_id, "codes": codes}, status_code=201)


@router.delete("/{product_id}/codes/{code}")
def remove_code(product_id: int, code: str, store: Store = Depends(get_store)):
    codes = catalog_service.remove_code(store, product_id, code=code)
    return ok({"id": product_id, "codes": codes})
