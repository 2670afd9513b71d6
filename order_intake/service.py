"""Read and trigger operations exposed to HTTP handlers and the review UI."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from order_intake.errors import DocumentNotFoundError, OrderNotFoundError
from order_intake.ingest import IngestionOrchestrator
from order_intake.models import OrderRecord, OrderSummary, TriggerResult
from order_intake.store import OrderStore


class OrderService:
    def __init__(self, store: OrderStore, orchestrator: Optional[IngestionOrchestrator] = None) -> None:
        self.store = store
        self.orchestrator = orchestrator

    def list_orders(self) -> List[OrderSummary]:
        return [OrderSummary.from_record(r) for r in self.store.list_recent()]

    def get_order(self, order_id: str) -> OrderRecord:
        record = self.store.get(order_id)
        if record is None:
            raise OrderNotFoundError(order_id)
        return record

    def get_pdf(self, order_id: str) -> bytes:
        record = self.get_order(order_id)
        if not record.pdf_path:
            raise DocumentNotFoundError(order_id)
        path = Path(record.pdf_path)
        if not path.is_file():
            raise DocumentNotFoundError(order_id)
        return path.read_bytes()

    def request_refresh(self) -> TriggerResult:
        if self.orchestrator is None:
            raise RuntimeError("OrderService was built without an orchestrator.")
        return self.orchestrator.trigger()

    @property
    def refresh_running(self) -> bool:
        return self.orchestrator is not None and self.orchestrator.is_running
