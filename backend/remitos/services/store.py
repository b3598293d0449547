# backend/remitos/services/store.py
"""
Shared in-memory state behind every service.

All writers go through ``Store.mutate()``, which serializes them on one lock
and treats "change a copy, persist it, swap it in, rebuild the lookup maps"
as a single unit. Readers use ``Store.snapshot()``: the last committed
aggregate, which is never modified after it was swapped in.
"""
from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, NamedTuple, Optional

from ..core.errors import PersistenceError
from ..domain.catalog import CatalogIndex
from ..domain.constants import COUNTER_BRANCH_ID, COUNTER_PRODUCT_ID, COUNTER_SEEDS
from ..domain.entities import Branch, DeliveryNote, Order, Snapshot
from .storage import SnapshotRepository

logger = logging.getLogger(__name__)


def next_id(items: Iterable) -> int:
    return max((x.id for x in items), default=0) + 1


class Views(NamedTuple):
    """Lookup maps derived from one committed snapshot."""
    catalog: CatalogIndex
    branches: Dict[int, Branch]
    notes: Dict[int, DeliveryNote]
    orders: Dict[int, Order]


class Store:
    def __init__(self, repository: SnapshotRepository, snapshot: Optional[Snapshot] = None):
        self.repository = repository
        self._lock = threading.RLock()
        self._state = snapshot if snapshot is not None else Snapshot()
        self._counters: Dict[str, int] = dict(self._state.counters)
        # ids are never handed out twice, not even after the top one is deleted
        for name, items in ((COUNTER_BRANCH_ID, self._state.branches), (COUNTER_PRODUCT_ID, self._state.products)):
            self._counters[name] = max(self._counters.get(name, 0), next_id(items) - 1)
        self.views = self._build_views(self._state)

    @classmethod
    def open(cls, repository: SnapshotRepository) -> "Store":
        """Load the persisted aggregate (or start empty)."""
        try:
            snapshot = repository.load()
        except Exception as e:
            logger.exception("snapshot load failed (%s)", type(repository).__name__)
            raise PersistenceError(f"Snapshot could not be loaded: {type(e).__name__}: {e}") from e
        if snapshot is None:
            logger.info("No snapshot found, starting with an empty store")
        else:
            logger.info(
                "Snapshot loaded: %d branches, %d products, %d notes, %d orders",
                len(snapshot.branches), len(snapshot.products), len(snapshot.notes), len(snapshot.orders),
            )
        return cls(repository, snapshot)

    # ---- reads ----
    @property
    def catalog(self) -> CatalogIndex:
        return self.views.catalog

    @property
    def branches(self) -> Dict[int, Branch]:
        return self.views.branches

    @property
    def notes(self) -> Dict[int, DeliveryNote]:
        return self.views.notes

    @property
    def orders(self) -> Dict[int, Order]:
        return self.views.orders

    def snapshot(self) -> Snapshot:
        return self._state

    def counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, COUNTER_SEEDS.get(name, 0))

    # ---- writes ----
    def allocate(self, name: str) -> int:
        """Next value of a sequence. Spent immediately, even if the save that
        follows fails."""
        with self._lock:
            value = self._counters.get(name, COUNTER_SEEDS.get(name, 0)) + 1
            self._counters[name] = value
            return value

    @contextmanager
    def mutate(self) -> Iterator[Snapshot]:
        with self._lock:
            working = self._state.model_copy(deep=True)
            yield working
            working.counters = dict(self._counters)
            try:
                self.repository.save(working)
            except Exception as e:
                logger.exception("snapshot save failed; mutation discarded")
                raise PersistenceError(f"State could not be saved: {type(e).__name__}: {e}") from e
            views = self._build_views(working)
            self._state, self.views = working, views

    @staticmethod
    def _build_views(state: Snapshot) -> Views:
        # built in full before anything is published; one reference swap
        return Views(
            catalog=CatalogIndex(state.products),
            branches={b.id: b for b in state.branches},
            notes={n.id: n for n in state.notes},
            orders={o.id: o for o in state.orders},
        )
