import random

import pytest

from remitos.core.errors import (
    CodeCapExceeded,
    DuplicateCode,
    EmptyCode,
    EmptyDescription,
    ProductNotFound,
    UnknownCode,
)
from remitos.domain.constants import CODE_CAP
from remitos.services import catalog_service


def _assert_catalog_consistent(store):
    owners = {}
    for p in store.snapshot().products:
        assert len(p.codes) <= CODE_CAP
        for c in p.codes:
            assert c not in owners, f"code {c} held by {owners[c]} and {p.id}"
            owners[c] = p.id
    assert {c: p.id for c, p in store.catalog.by_code.items()} == owners
    assert set(store.catalog.by_id) == {p.id for p in store.snapshot().products}


def test_create_and_find_by_code(store):
    p = catalog_service.create_product(store, description=" Auricular Redragón ", code="7790000000011")

    assert p.id == 1
    assert p.description == "Auricular Redragón"
    assert catalog_service.find_by_code(store, " 7790000000011 ").id == 1

    with pytest.raises(UnknownCode):
        catalog_service.find_by_code(store, "0000")
    with pytest.raises(EmptyCode):
        catalog_service.find_by_code(store, "  ")


def test_create_requires_description(store):
    with pytest.raises(EmptyDescription):
        catalog_service.create_product(store, description="  ", code="1")


def test_duplicate_code_is_rejected_and_state_untouched(store, repo):
    a = catalog_service.create_product(store, description="Remera negra", code="7790000000011")
    b = catalog_service.create_product(store, description="Gorra")
    saves = repo.saves

    with pytest.raises(DuplicateCode):
        catalog_service.add_code(store, b.id, code="7790000000011")
    with pytest.raises(DuplicateCode):
        catalog_service.create_product(store, description="Otra", code="7790000000011")

    assert repo.saves == saves
    assert catalog_service.get_product(store, b.id).codes == []
    assert catalog_service.find_by_code(store, "7790000000011").id == a.id
    assert len(store.snapshot().products) == 2


def test_code_cap(store):
    p = catalog_service.create_product(store, description="Cable USB")
    for i in range(CODE_CAP):
        codes = catalog_service.add_code(store, p.id, code=f"10{i}")
    assert codes == ["100", "101", "102"]

    with pytest.raises(CodeCapExceeded):
        catalog_service.add_code(store, p.id, code="999")
    assert "999" not in store.catalog.by_code


def test_add_code_checks_product_first(store):
    with pytest.raises(ProductNotFound):
        catalog_service.add_code(store, 42, code="")

    p = catalog_service.create_product(store, description="Cable USB")
    with pytest.raises(EmptyCode):
        catalog_service.add_code(store, p.id, code=" ")


def test_remove_code_frees_it(store):
    a = catalog_service.create_product(store, description="Mouse", code="555555")
    b = catalog_service.create_product(store, description="Teclado")

    assert catalog_service.remove_code(store, a.id, code="555555") == []
    assert catalog_service.add_code(store, b.id, code="555555") == ["555555"]
    assert catalog_service.find_by_code(store, "555555").id == b.id


def test_rename_and_delete(store):
    p = catalog_service.create_product(store, description="Mouse", code="111111")

    assert catalog_service.rename_product(store, p.id, description="Mouse inalámbrico").description == "Mouse inalámbrico"
    with pytest.raises(EmptyDescription):
        catalog_service.rename_product(store, p.id, description="")

    assert catalog_service.delete_product(store, p.id) == 1
    with pytest.raises(ProductNotFound):
        catalog_service.delete_product(store, p.id)
    with pytest.raises(UnknownCode):
        catalog_service.find_by_code(store, "111111")


def test_resolve_priority(store):
    mouse = catalog_service.create_product(store, description="Mouse", code="111111")
    keyboard = catalog_service.create_product(store, description="Teclado", code="222222")

    assert catalog_service.resolve_product(store, product_id=keyboard.id, code="111111").id == keyboard.id
    assert catalog_service.resolve_product(store, code="111111", description="Teclado").id == mouse.id
    assert catalog_service.resolve_product(store, description="  MOUSE ").id == mouse.id
    assert catalog_service.resolve_product(store, product_id=99, description="teclado").id == keyboard.id
    assert catalog_service.resolve_product(store, code="333333") is None


def test_search_ignores_accents_and_case(store):
    catalog_service.create_product(store, description="Auricular Redragón Zeus", code="7791000000001")
    catalog_service.create_product(store, description="Mouse Logitech", code="7791000000002")

    assert [p.description for p in catalog_service.search_products(store, "REDRAGON")] == ["Auricular Redragón Zeus"]
    assert len(catalog_service.search_products(store, "7791")) == 2
    assert len(catalog_service.search_products(store, "")) == 2
    assert len(catalog_service.search_products(store, None, limit=1)) == 1


def test_search_puts_exact_code_owner_first(store):
    catalog_service.create_product(store, description="Soporte", code="77910000000021")
    cable = catalog_service.create_product(store, description="Cable", code="7791000000002")

    hits = catalog_service.search_products(store, "7791000000002")
    assert [p.id for p in hits] == [cable.id, 1]


def test_random_operations_keep_catalog_consistent(store):
    rng = random.Random(20240501)
    pool = [f"77900000000{i:02d}" for i in range(10)]
    for name in ("Remera", "Gorra", "Buzo", "Campera"):
        catalog_service.create_product(store, description=name)

    for _ in range(300):
        pid = rng.randint(1, 5)
        code = rng.choice(pool)
        op = rng.random()
        try:
            if op < 0.6:
                catalog_service.add_code(store, pid, code=code)
            elif op < 0.9:
                catalog_service.remove_code(store, pid, code=code)
            else:
                catalog_service.create_product(store, description=f"Producto {code}", code=code)
        except (DuplicateCode, CodeCapExceeded, ProductNotFound):
            pass
        _assert_catalog_consistent(store)


def test_same_code_on_two_products(store):
    p1 = catalog_service.create_product(store, description="Remera")
    p2 = catalog_service.create_product(store, description="Gorra")

    catalog_service.add_code(store, p1.id, code="123")
    with pytest.raises(DuplicateCode):
        catalog_service.add_code(store, p2.id, code="123")
    with pytest.raises(DuplicateCode):
        catalog_service.add_code(store, p1.id, code="123")

    assert catalog_service.get_product(store, p1.id).codes == ["123"]
    assert catalog_service.get_product(store, p2.id).codes == []


def test_deleted_product_id_is_not_reused(store):
    catalog_service.create_product(store, description="Remera")
    catalog_service.create_product(store, description="Gorra")
    catalog_service.delete_product(store, 2)

    p = catalog_service.create_product(store, description="Cable USB")

    assert p.id == 3
    with pytest.raises(ProductNotFound):
        catalog_service.get_product(store, 2)


def test_duplicate_reported_before_cap(store):
    owner = catalog_service.create_product(store, description="Remera", code="999")
    full = catalog_service.create_product(store, description="Cable USB")
    for i in range(CODE_CAP):
        catalog_service.add_code(store, full.id, code=f"10{i}")

    with pytest.raises(DuplicateCode):
        catalog_service.add_code(store, full.id, code="999")
    assert catalog_service.get_product(store, owner.id).codes == ["999"]
