# backend/remitos/routers/branches.py
from fastapi import APIRouter, Depends

from ..core.api import list_meta, ok
from ..core.deps import get_store
from ..schemas.branch import BranchIn
from ..services import branch_service
from ..services.store import Store

router = APIRouter(prefix="/branches", tags=["branches"])


@router.get("")
def list_branches(store: Store = Depends(get_store)):
    rows = branch_service.list_branches(store)
    return ok(rows, meta=list_meta(rows))


@router.post("", status_code=201)
def add_branch(payload: BranchIn, store: Store = Depends(get_store)):
    b = branch_service.add_branch(store, name=payload.name, address=payload.address or "", phone=payload.phone)
    return ok(b, status_code=201)


@router.post("/seed")
def seed_branches(store: Store = Depends(get_store)):
    created = branch_service.seed_branches(store)
    return ok({"created": created, "total": len(store.branches)})


@router.get("/{branch_id}")
def get_branch(branch_id: int, store: Store = Depends(get_store)):
    return ok(branch_service.get_branch(store, branch_id))


@router.put("/{branch_id}")
def update_branch(branch_id: int, payload: BranchIn, store: Store = Depends(get_store)):
    b = branch_service.update_branch(
        store, branch_id, name=payload.name, address=payload.address or "", phone=payload.phone
    )
    return ok(b)


@router.delete("/{branch_id}")
def delete_branch(branch_id: int, store: Store = Depends(get_store)):
    return ok({"removed": branch_service.delete_branch(store, branch_id)})
