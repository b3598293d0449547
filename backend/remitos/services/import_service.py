# backend/remitos/services/import_service.py
"""
Bulk product load from spreadsheet rows.

Row layout (first worksheet): A code1, B code2, C code3, D description.
The first row may be a header.
"""
from __future__ import annotations
import logging
from typing import Any, Iterable, List, Sequence, Tuple

from openpyxl import load_workbook

from ..core.errors import CodeCapExceeded, DuplicateCode
from ..domain.normalize import clean_text, normalize_text
from ..domain.results import ImportSummary
from .catalog_service import _add_code_in, _create_in
from .store import Store

logger = logging.getLogger(__name__)


def _cell(row: Sequence[Any], i: int) -> Any:
    return row[i] if len(row) > i else None


def _as_text(value: Any) -> str:
    # 7791234567890.0 from a numeric cell is still a barcode
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return clean_text(value)


def _is_number(value: Any) -> bool:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return True
    text = clean_text(value)
    if not text:
        return True
    try:
        float(text)
        return True
    except ValueError:
        return False


def looks_like_header(row: Sequence[Any]) -> bool:
    first, fourth = _cell(row, 0), _cell(row, 3)
    first_ok = "cod" in clean_text(first).lower() or not _is_number(first)
    fourth_ok = "desc" in clean_text(fourth).lower() or isinstance(fourth, str)
    return first_ok and fourth_ok


def import_product_rows(store: Store, rows: Iterable[Sequence[Any]]) -> ImportSummary:
    """
    Runs every row through the catalog rules in one mutation:
    - blank rows are ignored, rows without description are invalid;
    - a row joins the product with the same normalized description, or
      creates one;
    - a code held by another product is skipped as duplicate; a code the
      product already has, or a product already at the cap, is ignored.
    """
    rows = [list(r or []) for r in rows]
    summary = ImportSummary()
    start = 0
    if rows and looks_like_header(rows[0]):
        summary.header_skipped = True
        start = 1

    with store.mutate() as state:
        by_description = {}
        for p in state.products:
            by_description.setdefault(normalize_text(p.description), p)

        for row in rows[start:]:
            summary.total_rows += 1
            codes = [_as_text(_cell(row, i)) for i in range(3)]
            desc = _as_text(_cell(row, 3))

            if not desc and not any(codes):
                continue
            if not desc:
                summary.invalid_rows += 1
                continue

            key = normalize_text(desc)
            p = by_description.get(key)
            if p is None:
                p = _create_in(store, state, description=desc)
                by_description[key] = p
                summary.created += 1

            for code in filter(None, codes):
                if code in p.codes:
                    continue
                try:
                    _add_code_in(state, p, code)
                except DuplicateCode:
                    summary.duplicates_skipped += 1
                except CodeCapExceeded:
                    logger.debug("code %s ignored, product %s is full", code, p.id)
                else:
                    summary.codes_added += 1

    logger.info(
        "product import: %d rows, %d created, %d codes added, %d duplicates, %d invalid",
        summary.total_rows, summary.created, summary.codes_added,
        summary.duplicates_skipped, summary.invalid_rows,
    )
    return summary


def read_xlsx_rows(source) -> List[Tuple[Any, ...]]:
    """Values of the first worksheet; ``source`` is a path or a binary file object."""
    wb = load_workbook(source, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            raise ValueError("The workbook has no worksheet.")
        return [tuple(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
