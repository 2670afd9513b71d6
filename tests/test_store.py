from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from order_intake.errors import SourceUnreadableError
from order_intake.models import CatalogEntry, CustomerInfo, DeliveryInfo, OrderRecord, ValidatedLineItem
from order_intake.store import InMemoryOrderStore, JsonCatalogSnapshot, JsonOrderStore

BASE = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


def _record(order_id: str, minutes: int, name: str = "Jane Roe") -> OrderRecord:
    return OrderRecord(
        order_id=order_id,
        source_file=f"{order_id}.txt",
        processed_at=BASE + timedelta(minutes=minutes),
        customer=CustomerInfo(name=name, address="1 Main St"),
        delivery=DeliveryInfo(date="2025-06-20", address="1 Main St"),
        items=(
            ValidatedLineItem(
                sku="DSK-0001",
                quantity=50,
                confidence=0.8,
                issues=("Insufficient stock. Available: 31, Requested: 50",),
                suggestions=('Mapped "desk" to DSK-0001: Desk TRÄNHOLM 19',),
            ),
        ),
        overall_confidence=0.8,
        pdf_path=f"generated/{order_id}.pdf",
    )


@pytest.mark.parametrize("make_store", [lambda p: InMemoryOrderStore(), lambda p: JsonOrderStore(p / "orders.json")])
def test_store_contract(tmp_path: Path, make_store) -> None:
    store = make_store(tmp_path)
    store.upsert(_record("older", 0))
    store.upsert(_record("newer", 5))
    store.upsert(_record("middle", 2))

    assert [r.order_id for r in store.list_recent()] == ["newer", "middle", "older"]
    assert store.get("middle") == _record("middle", 2)
    assert store.get("unknown") is None

    store.upsert(_record("middle", 2, name="Replaced"))
    assert store.get("middle").customer.name == "Replaced"
    assert len(store.list_recent()) == 3

    store.clear()
    assert store.list_recent() == []


def test_json_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "orders.json"
    JsonOrderStore(path).upsert(_record("o1", 0))

    reloaded = JsonOrderStore(path).get("o1")

    assert reloaded == _record("o1", 0)


def test_json_store_rejects_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "orders.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SourceUnreadableError):
        JsonOrderStore(path).list_recent()


@pytest.mark.parametrize(
    "content",
    [
        '[{"meta": {}}]',
        '["not an order"]',
        '[{"orderId": "o-1", "meta": {"sourceFile": "a.txt"}}]',
        '[{"orderId": "o-1", "meta": {"processedAt": "yesterday"}}]',
    ],
)
def test_json_store_rejects_malformed_entries(tmp_path: Path, content: str) -> None:
    path = tmp_path / "orders.json"
    path.write_text(content, encoding="utf-8")
    store = JsonOrderStore(path)

    with pytest.raises(SourceUnreadableError):
        store.list_recent()
    with pytest.raises(SourceUnreadableError):
        store.get("o-1")


def test_catalog_snapshot_writes_and_loads(tmp_path: Path) -> None:
    snapshot = JsonCatalogSnapshot(tmp_path / "catalog.json")
    entries = [CatalogEntry(sku="A1", description="Blue Desk", price=5.5, stock=3, min_order_qty=1)]

    snapshot(entries)

    assert snapshot.load() == entries
    assert JsonCatalogSnapshot(tmp_path / "none.json").load() == []
