"""Catalog resolution, business rules and confidence scoring for candidate orders."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from order_intake.models import (
    CandidateItem,
    CandidateOrder,
    CatalogEntry,
    OrderRecord,
    ValidatedLineItem,
)

FUZZY_CONFIDENCE_CAP = 0.8
UNRESOLVED_CONFIDENCE = 0.1


class CatalogLookup(Protocol):
    def exact_lookup(self, sku: str) -> Optional[CatalogEntry]:
        ...

    def fuzzy_search(self, text: str) -> Sequence[CatalogEntry]:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clamp_confidence(value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:
        return 0.0
    return max(0.0, min(1.0, number))


def not_found_issue(product_text: str) -> str:
    return f'Product "{product_text}" not found in catalog'


def mapped_suggestion(product_text: str, entry: CatalogEntry) -> str:
    return f'Mapped "{product_text}" to {entry.sku}: {entry.description}'


def business_rule_issues(entry: CatalogEntry, quantity: int) -> List[str]:
    """Stock and MOQ checks; each rule reports independently."""
    issues: List[str] = []
    if entry.stock == 0:
        issues.append("Out of stock")
    elif quantity > entry.stock:
        issues.append(f"Insufficient stock. Available: {entry.stock}, Requested: {quantity}")
    if quantity < entry.min_order_qty:
        issues.append(
            f"Below minimum order quantity. MOQ: {entry.min_order_qty}, Requested: {quantity}"
        )
    return issues


def overall_confidence(items: Sequence[ValidatedLineItem]) -> float:
    if not items:
        return 0.0
    return sum(item.confidence for item in items) / len(items)


class EnrichmentEngine:
    def __init__(
        self,
        catalog: CatalogLookup,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.catalog = catalog
        self.clock = clock

    def resolve(self, product_text: str) -> Tuple[Optional[CatalogEntry], bool]:
        """Return (entry, fuzzy) for a product text; entry is None when unresolved."""
        entry = self.catalog.exact_lookup(product_text.strip())
        if entry is not None:
            return entry, False
        matches = self.catalog.fuzzy_search(product_text)
        if matches:
            return matches[0], True
        return None, False

    def enrich_item(self, item: CandidateItem) -> ValidatedLineItem:
        issues: List[str] = []
        suggestions: List[str] = []
        confidence = clamp_confidence(item.confidence)
        sku = item.product_text

        entry, fuzzy = self.resolve(item.product_text)
        if entry is None:
            issues.append(not_found_issue(item.product_text))
            confidence = UNRESOLVED_CONFIDENCE
        else:
            sku = entry.sku
            if fuzzy:
                suggestions.append(mapped_suggestion(item.product_text, entry))
                confidence = min(confidence, FUZZY_CONFIDENCE_CAP)
            # Fuzzy guesses are rule-checked exactly like exact matches.
            issues.extend(business_rule_issues(entry, item.quantity))

        return ValidatedLineItem(
            sku=sku,
            quantity=item.quantity,
            confidence=confidence,
            issues=tuple(issues),
            suggestions=tuple(suggestions),
        )

    def enrich(self, candidate: CandidateOrder, order_id: str, source_file: str) -> OrderRecord:
        items = tuple(self.enrich_item(item) for item in candidate.items)
        return OrderRecord(
            order_id=order_id,
            source_file=source_file,
            processed_at=self.clock(),
            customer=candidate.customer,
            delivery=candidate.delivery,
            items=items,
            overall_confidence=overall_confidence(items),
            pdf_path=None,
        )
