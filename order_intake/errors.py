"""Error taxonomy for the order intake pipeline."""

from __future__ import annotations


class OrderIntakeError(Exception):
    """Base class for all order intake errors."""


class SourceUnreadableError(OrderIntakeError):
    pass


class CatalogSourceError(SourceUnreadableError):
    pass


class EmailSourceError(SourceUnreadableError):
    pass


class ExtractionError(OrderIntakeError):
    pass


class RenderError(OrderIntakeError):
    pass


class BatchInProgressError(OrderIntakeError):
    pass


class OrderNotFoundError(OrderIntakeError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class DocumentNotFoundError(OrderIntakeError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"PDF not found for order: {order_id}")
        self.order_id = order_id
