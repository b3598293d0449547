# backend/remitos/services/branch_service.py
from __future__ import annotations
import logging
from typing import List, Optional

from ..core.errors import BranchNotFound, EmptyName
from ..domain.constants import COUNTER_BRANCH_ID, SEED_BRANCHES
from ..domain.entities import Branch
from ..domain.normalize import clean_text
from .store import Store

logger = logging.getLogger(__name__)


def _find(branches: List[Branch], branch_id: int) -> Optional[Branch]:
    return next((b for b in branches if b.id == branch_id), None)


def list_branches(store: Store) -> List[Branch]:
    return list(store.snapshot().branches)


def get_branch(store: Store, branch_id: int) -> Branch:
    b = store.branches.get(branch_id)
    if not b:
        raise BranchNotFound(f"Branch {branch_id} not found.")
    return b


def add_branch(store: Store, *, name: str, address: str = "", phone: Optional[str] = None) -> Branch:
    name = clean_text(name)
    if not name:
        raise EmptyName("Branch name is required.")

    with store.mutate() as state:
        branch = Branch(id=store.allocate(COUNTER_BRANCH_ID), name=name, address=address, phone=phone)
        state.branches.append(branch)
    logger.info("branch added (id=%s, name=%s)", branch.id, branch.name)
    return branch


def update_branch(
    store: Store, branch_id: int, *, name: str, address: str = "", phone: Optional[str] = None
) -> Branch:
    name = clean_text(name)
    with store.mutate() as state:
        b = _find(state.branches, branch_id)
        if not b:
            raise BranchNotFound(f"Branch {branch_id} not found.")
        if not name:
            raise EmptyName("Branch name is required.")
        b.name = name
        b.address = clean_text(address)
        b.phone = clean_text(phone) or None
    return b


def delete_branch(store: Store, branch_id: int) -> int:
    """
    Removes the branch; notes created against it keep their own copy of the
    branch fields. Returns the number of removed branches (0 or 1).
    """
    with store.mutate() as state:
        before = len(state.branches)
        state.branches = [b for b in state.branches if b.id != branch_id]
        removed = before - len(state.branches)
    if removed:
        logger.info("branch deleted (id=%s)", branch_id)
    return removed


def seed_branches(store: Store) -> int:
    """Installs the default branch list when the directory is empty (idempotent)."""
    if store.snapshot().branches:
        return 0
    with store.mutate() as state:
        if state.branches:
            return 0
        for data in SEED_BRANCHES:
            state.branches.append(Branch(id=store.allocate(COUNTER_BRANCH_ID), **data))
        created = len(state.branches)
    logger.info("seeded %d branches", created)
    return created
