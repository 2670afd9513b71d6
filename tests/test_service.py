from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from order_intake.errors import DocumentNotFoundError, OrderNotFoundError
from order_intake.models import CustomerInfo, DeliveryInfo, OrderRecord, TriggerResult
from order_intake.service import OrderService
from order_intake.store import InMemoryOrderStore

BASE = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


def _record(order_id: str, minutes: int, pdf_path=None) -> OrderRecord:
    return OrderRecord(
        order_id=order_id,
        source_file=f"sample_email_{minutes}.txt",
        processed_at=BASE + timedelta(minutes=minutes),
        customer=CustomerInfo(name=f"Customer {order_id}", address="1 Main St"),
        delivery=DeliveryInfo(),
        items=(),
        overall_confidence=0.0,
        pdf_path=pdf_path,
    )


class _FakeOrchestrator:
    def __init__(self) -> None:
        self.is_running = False

    def trigger(self) -> TriggerResult:
        if self.is_running:
            return TriggerResult(status="already_in_progress", message="Refresh already in progress")
        self.is_running = True
        return TriggerResult(status="initiated", message="Refresh initiated")


def test_list_orders_returns_summaries_newest_first() -> None:
    service = OrderService(InMemoryOrderStore([_record("a", 1), _record("b", 3), _record("c", 2)]))

    summaries = service.list_orders()

    assert [s.id for s in summaries] == ["b", "c", "a"]
    assert summaries[0].to_dict() == {
        "id": "b",
        "sourceFile": "sample_email_3.txt",
        "processedAt": "2025-06-01T09:03:00+00:00",
        "customerName": "Customer b",
        "overallConfidence": 0.0,
        "pdfPath": None,
    }


def test_empty_store_lists_nothing() -> None:
    assert OrderService(InMemoryOrderStore()).list_orders() == []


def test_get_order_not_found_is_distinct_error() -> None:
    service = OrderService(InMemoryOrderStore([_record("a", 1)]))

    assert service.get_order("a").order_id == "a"
    with pytest.raises(OrderNotFoundError):
        service.get_order("missing")


def test_get_pdf_reads_rendered_document(tmp_path: Path) -> None:
    pdf = tmp_path / "a.pdf"
    pdf.write_bytes(b"%PDF-1.7 body")
    service = OrderService(InMemoryOrderStore([_record("a", 1, pdf_path=str(pdf))]))

    assert service.get_pdf("a") == b"%PDF-1.7 body"


def test_get_pdf_distinguishes_missing_order_from_missing_document(tmp_path: Path) -> None:
    service = OrderService(
        InMemoryOrderStore([_record("a", 1, pdf_path=str(tmp_path / "gone.pdf")), _record("b", 2)])
    )

    with pytest.raises(OrderNotFoundError):
        service.get_pdf("missing")
    with pytest.raises(DocumentNotFoundError):
        service.get_pdf("a")
    with pytest.raises(DocumentNotFoundError):
        service.get_pdf("b")


def test_request_refresh_reports_in_progress() -> None:
    service = OrderService(InMemoryOrderStore(), _FakeOrchestrator())

    assert service.request_refresh().status == "initiated"
    assert service.refresh_running
    assert service.request_refresh().status == "already_in_progress"
