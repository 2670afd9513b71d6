"""Order, catalog and batch records shared across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

UNKNOWN_CUSTOMER = "Unknown Customer"
ADDRESS_NOT_FOUND = "Address not found"
DATE_NOT_SPECIFIED = "not specified"


@dataclass(frozen=True)
class CatalogEntry:
    sku: str
    description: str
    price: float
    stock: int
    min_order_qty: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sku": self.sku,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "minOrderQty": self.min_order_qty,
        }


@dataclass(frozen=True)
class CustomerInfo:
    name: str = UNKNOWN_CUSTOMER
    address: str = ADDRESS_NOT_FOUND


@dataclass(frozen=True)
class DeliveryInfo:
    date: str = DATE_NOT_SPECIFIED
    address: str = ADDRESS_NOT_FOUND


@dataclass(frozen=True)
class CandidateItem:
    product_text: str
    quantity: int
    confidence: float


@dataclass(frozen=True)
class CandidateOrder:
    """Unvalidated order as guessed by the language model."""

    customer: CustomerInfo = field(default_factory=CustomerInfo)
    items: Sequence[CandidateItem] = field(default_factory=tuple)
    delivery: DeliveryInfo = field(default_factory=DeliveryInfo)


@dataclass(frozen=True)
class ValidatedLineItem:
    sku: str
    quantity: int
    confidence: float
    issues: Sequence[str] = field(default_factory=tuple)
    suggestions: Sequence[str] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sku": self.sku,
            "quantity": self.quantity,
            "confidence": self.confidence,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ValidatedLineItem":
        return cls(
            sku=str(payload["sku"]),
            quantity=int(payload["quantity"]),
            confidence=float(payload["confidence"]),
            issues=tuple(payload.get("issues") or ()),
            suggestions=tuple(payload.get("suggestions") or ()),
        )


@dataclass(frozen=True)
class OrderRecord:
    order_id: str
    source_file: str
    processed_at: datetime
    customer: CustomerInfo
    delivery: DeliveryInfo
    items: Sequence[ValidatedLineItem]
    overall_confidence: float
    pdf_path: Optional[str] = None

    @property
    def issue_count(self) -> int:
        return sum(len(item.issues) for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "meta": {
                "sourceFile": self.source_file,
                "processedAt": self.processed_at.isoformat(),
            },
            "customer": {"name": self.customer.name, "address": self.customer.address},
            "delivery": {"date": self.delivery.date, "address": self.delivery.address},
            "items": [item.to_dict() for item in self.items],
            "overallConfidence": self.overall_confidence,
            "pdfPath": self.pdf_path,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "OrderRecord":
        meta = payload.get("meta") or {}
        customer = payload.get("customer") or {}
        delivery = payload.get("delivery") or {}
        return cls(
            order_id=str(payload["orderId"]),
            source_file=str(meta.get("sourceFile", "")),
            processed_at=datetime.fromisoformat(meta["processedAt"]),
            customer=CustomerInfo(
                name=customer.get("name", UNKNOWN_CUSTOMER),
                address=customer.get("address", ADDRESS_NOT_FOUND),
            ),
            delivery=DeliveryInfo(
                date=delivery.get("date", DATE_NOT_SPECIFIED),
                address=delivery.get("address", ADDRESS_NOT_FOUND),
            ),
            items=tuple(ValidatedLineItem.from_dict(i) for i in payload.get("items") or ()),
            overall_confidence=float(payload.get("overallConfidence", 0.0)),
            pdf_path=payload.get("pdfPath"),
        )


@dataclass(frozen=True)
class OrderSummary:
    id: str
    source_file: str
    processed_at: datetime
    customer_name: str
    overall_confidence: float
    pdf_path: Optional[str]

    @classmethod
    def from_record(cls, record: OrderRecord) -> "OrderSummary":
        return cls(
            id=record.order_id,
            source_file=record.source_file,
            processed_at=record.processed_at,
            customer_name=record.customer.name,
            overall_confidence=record.overall_confidence,
            pdf_path=record.pdf_path,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sourceFile": self.source_file,
            "processedAt": self.processed_at.isoformat(),
            "customerName": self.customer_name,
            "overallConfidence": self.overall_confidence,
            "pdfPath": self.pdf_path,
        }


class BatchState(str, Enum):
    PENDING = "pending"
    EXTRACTED = "extracted"
    ENRICHED = "enriched"
    RENDERED = "rendered"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(frozen=True)
class EmailOutcome:
    source_file: str
    state: BatchState
    order_id: Optional[str] = None
    failed_after: Optional[BatchState] = None  # last state reached before FAILED
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is BatchState.PERSISTED


@dataclass(frozen=True)
class TriggerResult:
    status: str  # initiated | already_in_progress
    message: str

    @property
    def started(self) -> bool:
        return self.status == "initiated"


def summarize_outcomes(outcomes: Sequence[EmailOutcome]) -> Dict[str, int]:
    counts: Dict[str, int] = {"total": len(outcomes), "persisted": 0, "failed": 0}
    for outcome in outcomes:
        if outcome.ok:
            counts["persisted"] += 1
        elif outcome.state is BatchState.FAILED:
            counts["failed"] += 1
    return counts


def line_items_to_rows(items: Sequence[ValidatedLineItem]) -> List[Dict[str, Any]]:
    return [
        {
            "sku": item.sku,
            "quantity": item.quantity,
            "confidence": item.confidence,
            "issues": " | ".join(item.issues),
            "suggestions": " | ".join(item.suggestions),
        }
        for item in items
    ]
