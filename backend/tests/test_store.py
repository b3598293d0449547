import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from remitos.core.errors import PersistenceError
from remitos.domain.constants import COUNTER_BRANCH_ID, COUNTER_NOTE_NUMBER, COUNTER_ORDER_ID, COUNTER_PRODUCT_ID
from remitos.domain.entities import Branch, Product, Snapshot
from remitos.services import branch_service, catalog_service, note_service, order_service
from remitos.services.storage import JsonFileRepository, MemoryRepository, SqlSnapshotRepository, build_repository
from remitos.services.store import Store


def _fill(store):
    branch_service.add_branch(store, name="Lomas", phone="11 4444-5555")
    catalog_service.create_product(store, description="Gorra", code="7790000000028")
    note = note_service.create_note(store, branch_id=1, items=[{"description": "Gorra", "expected": 2}])
    note_service.scan(store, note.id, "7790000000028")
    order_service.submit_order(store, rows=[{"description": "Gorra", "per_branch": {1: 3}}])
    return note


def test_failed_save_discards_mutation_but_spends_number(store, repo):
    branch_service.add_branch(store, name="Lomas")

    repo.fail_next = True
    with pytest.raises(PersistenceError):
        note_service.create_note(store, branch_id=1, items=[{"description": "Gorra", "expected": 1}])

    assert store.snapshot().notes == []
    assert store.notes == {}

    note = note_service.create_note(store, branch_id=1, items=[{"description": "Gorra", "expected": 1}])
    assert note.number == 3806


def test_failed_save_keeps_catalog_index(store, repo):
    catalog_service.create_product(store, description="Gorra", code="111111")

    repo.fail_next = True
    with pytest.raises(PersistenceError):
        catalog_service.add_code(store, 1, code="222222")

    assert "222222" not in store.catalog.by_code
    assert catalog_service.get_product(store, 1).codes == ["111111"]


def test_json_file_round_trip(tmp_path):
    path = str(tmp_path / "data.json")
    store = Store.open(JsonFileRepository(path))
    note = _fill(store)

    reopened = Store.open(JsonFileRepository(path))

    assert reopened.snapshot() == store.snapshot()
    assert reopened.notes[note.id].items[0].received == 1
    assert reopened.counter(COUNTER_NOTE_NUMBER) == 3805
    assert reopened.counter(COUNTER_ORDER_ID) == 1
    assert reopened.catalog.resolve(code="7790000000028").description == "Gorra"


def test_sql_round_trip(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'remitos.db'}")
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    repo = build_repository("sql", data_file="unused", session_factory=factory)
    assert isinstance(repo, SqlSnapshotRepository)

    store = Store.open(repo)
    _fill(store)
    reopened = Store.open(SqlSnapshotRepository(factory))

    assert reopened.snapshot() == store.snapshot()
    engine.dispose()


def test_empty_storage_starts_with_seeded_counters(tmp_path):
    store = Store.open(JsonFileRepository(str(tmp_path / "missing.json")))

    assert store.snapshot().notes == []
    assert store.counter(COUNTER_NOTE_NUMBER) == 3804
    assert store.counter(COUNTER_ORDER_ID) == 0


def test_corrupt_file_raises_persistence_error(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        Store.open(JsonFileRepository(str(path)))


def test_unknown_backend():
    with pytest.raises(RuntimeError):
        build_repository("mongo", data_file="x")


def test_legacy_data_file_is_migrated(tmp_path):
    legacy = {
        "branches": [{"name": "Lomas", "address": "Portal Lomas", "phone": ""}],
        "products": [{"id": 1, "description": "Gorra", "codes": ["7790000000028", ""]}],
        "remitos": [
            {
                "id": 1,
                "numero": 3805,
                "fecha": "2024-05-01",
                "origin": "Juan Manuel de Rosas 1325",
                "branch": {"id": 1, "name": "Lomas", "address": "Portal Lomas"},
                "items": [{"description": "Gorra", "qty": 2, "received": 1}],
                "status": "pendiente",
                "note": "",
                "pdf": "/pdf/remito_3805.pdf",
                "publicUrl": "/r/1",
            }
        ],
        "counters": {"remito": 3805},
    }
    path = tmp_path / "data.json"
    path.write_text(json.dumps(legacy), encoding="utf-8")

    store = Store.open(JsonFileRepository(str(path)))
    note = store.notes[1]

    assert (note.number, note.date, note.status) == (3805, "2024-05-01", "pending")
    assert (note.items[0].expected, note.items[0].received) == (2, 1)
    assert note.document == "/pdf/remito_3805.pdf"
    assert note.comment is None
    assert store.branches[1].phone is None
    assert store.catalog.by_id[1].codes == ["7790000000028"]
    assert store.counter(COUNTER_NOTE_NUMBER) == 3805

    branch_service.add_branch(store, name="Abasto")
    created = note_service.create_note(store, branch_id=2, items=[{"description": "Gorra", "expected": 1}])
    assert (created.id, created.number) == (2, 3806)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert "remitos" not in saved
    assert saved["counters"][COUNTER_NOTE_NUMBER] == 3806


def test_id_counters_start_above_stored_ids():
    snapshot = Snapshot(
        branches=[Branch(id=7, name="Lomas")],
        products=[Product(id=4, description="Gorra", codes=[])],
    )
    store = Store(MemoryRepository(snapshot), snapshot)

    assert store.counter(COUNTER_BRANCH_ID) == 7
    assert store.counter(COUNTER_PRODUCT_ID) == 4
    assert branch_service.add_branch(store, name="Abasto").id == 8
    assert catalog_service.create_product(store, description="Remera").id == 5


def test_deleted_ids_stay_spent_after_reopen(tmp_path):
    path = str(tmp_path / "data.json")
    store = Store.open(JsonFileRepository(path))
    branch_service.add_branch(store, name="Lomas")
    branch_service.add_branch(store, name="Abasto")
    branch_service.delete_branch(store, 2)

    reopened = Store.open(JsonFileRepository(path))

    assert branch_service.add_branch(reopened, name="Brown").id == 3


def test_lookup_maps_are_published_together(store):
    before = store.views
    branch_service.add_branch(store, name="Lomas")

    after = store.views
    assert after is not before
    assert store.branches is after.branches and store.catalog is after.catalog
    assert list(after.branches) == [1]
    assert before.branches == {}
