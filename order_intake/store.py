"""Order persistence behind a small store interface, plus the catalog snapshot mirror."""

from __future__ import annotations

import json
from pathlib import Path
import threading
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from loguru import logger

from order_intake.errors import SourceUnreadableError
from order_intake.models import CatalogEntry, OrderRecord


class OrderStore(Protocol):
    def get(self, order_id: str) -> Optional[OrderRecord]:
        ...

    def list_recent(self) -> List[OrderRecord]:
        ...

    def upsert(self, record: OrderRecord) -> None:
        ...

    def clear(self) -> None:
        ...


def _newest_first(records: Sequence[OrderRecord]) -> List[OrderRecord]:
    return sorted(records, key=lambda r: r.processed_at, reverse=True)


class InMemoryOrderStore:
    def __init__(self, records: Sequence[OrderRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, OrderRecord] = {r.order_id: r for r in records}

    def get(self, order_id: str) -> Optional[OrderRecord]:
        with self._lock:
            return self._records.get(order_id)

    def list_recent(self) -> List[OrderRecord]:
        with self._lock:
            return _newest_first(list(self._records.values()))

    def upsert(self, record: OrderRecord) -> None:
        with self._lock:
            self._records[record.order_id] = record

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class JsonOrderStore:
    """
    Flat-file store: one JSON document holding every order, re-read and
    rewritten wholesale on each mutation.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SourceUnreadableError(f"Cannot read order store {self.path}: {exc}") from exc
        if not isinstance(payload, list):
            raise SourceUnreadableError(f"Order store {self.path} is not a JSON list")
        orders: Dict[str, Dict[str, Any]] = {}
        for position, item in enumerate(payload):
            try:
                record = OrderRecord.from_dict(item)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise SourceUnreadableError(
                    f"Malformed order entry {position} in {self.path}: {exc!r}"
                ) from exc
            orders[record.order_id] = item
        return orders

    def _write(self, orders: Dict[str, Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(list(orders.values()), indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, order_id: str) -> Optional[OrderRecord]:
        with self._lock:
            payload = self._read().get(order_id)
        return OrderRecord.from_dict(payload) if payload else None

    def list_recent(self) -> List[OrderRecord]:
        with self._lock:
            payloads = list(self._read().values())
        return _newest_first([OrderRecord.from_dict(p) for p in payloads])

    def upsert(self, record: OrderRecord) -> None:
        with self._lock:
            orders = self._read()
            orders[record.order_id] = record.to_dict()
            self._write(orders)

    def clear(self) -> None:
        with self._lock:
            self._write({})


class JsonCatalogSnapshot:
    """Writes the loaded catalog to a JSON file for listing outside the pipeline."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def __call__(self, entries: Sequence[CatalogEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.debug("Catalog snapshot written to {}", self.path)

    def load(self) -> List[CatalogEntry]:
        if not self.path.exists():
            return []
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        return [
            CatalogEntry(
                sku=item["sku"],
                description=item["description"],
                price=float(item["price"]),
                stock=int(item["stock"]),
                min_order_qty=int(item["minOrderQty"]),
            )
            for item in payload
        ]
