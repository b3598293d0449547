# backend/remitos/scripts/seed.py
"""
Initial data for a fresh install:

    python -m remitos.scripts.seed                   # default branch list
    python -m remitos.scripts.seed productos.xlsx    # + product catalog

Safe to run twice: branches are only installed on an empty directory and
the catalog import skips codes and descriptions already present.
"""
import logging
import sys
from typing import Optional

from ..core.config import DATA_FILE, LOG_LEVEL, STORAGE_BACKEND
from ..services.branch_service import seed_branches
from ..services.import_service import import_product_rows, read_xlsx_rows
from ..services.storage import build_repository
from ..services.store import Store

logger = logging.getLogger(__name__)


def run(xlsx_path: Optional[str] = None, store: Optional[Store] = None) -> Store:
    if store is None:
        store = Store.open(build_repository(STORAGE_BACKEND, data_file=DATA_FILE))

    created = seed_branches(store)
    print(f">> Branches: {created} created, {len(store.branches)} total")

    if xlsx_path:
        summary = import_product_rows(store, read_xlsx_rows(xlsx_path))
        print(
            f">> Products from {xlsx_path}: {summary.created} created, "
            f"{summary.codes_added} codes, {summary.duplicates_skipped} duplicates, "
            f"{summary.invalid_rows} invalid rows"
        )

    print("Seed done.")
    return store


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    run(sys.argv[1] if len(sys.argv) > 1 else None)
