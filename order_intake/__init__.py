"""Order intake package exports."""

__version__ = "0.1.0"

from order_intake.catalog import CatalogIndex, load_catalog_entries
from order_intake.enrichment import EnrichmentEngine
from order_intake.errors import (
    BatchInProgressError,
    CatalogSourceError,
    DocumentNotFoundError,
    EmailSourceError,
    ExtractionError,
    OrderIntakeError,
    OrderNotFoundError,
    RenderError,
    SourceUnreadableError,
)
from order_intake.extraction import ChatCompletionClient, LLMOrderExtractor, fallback_candidate
from order_intake.ingest import IngestionOrchestrator
from order_intake.models import (
    BatchState,
    CandidateItem,
    CandidateOrder,
    CatalogEntry,
    CustomerInfo,
    DeliveryInfo,
    EmailOutcome,
    OrderRecord,
    OrderSummary,
    TriggerResult,
    ValidatedLineItem,
)
from order_intake.render import HtmlPdfRenderer
from order_intake.service import OrderService
from order_intake.sources import EmailSource
from order_intake.store import InMemoryOrderStore, JsonCatalogSnapshot, JsonOrderStore

__all__ = [
    "BatchInProgressError",
    "BatchState",
    "CandidateItem",
    "CandidateOrder",
    "CatalogEntry",
    "CatalogIndex",
    "CatalogSourceError",
    "ChatCompletionClient",
    "CustomerInfo",
    "DeliveryInfo",
    "DocumentNotFoundError",
    "EmailOutcome",
    "EmailSource",
    "EmailSourceError",
    "EnrichmentEngine",
    "ExtractionError",
    "HtmlPdfRenderer",
    "InMemoryOrderStore",
    "IngestionOrchestrator",
    "JsonCatalogSnapshot",
    "JsonOrderStore",
    "LLMOrderExtractor",
    "OrderIntakeError",
    "OrderNotFoundError",
    "OrderRecord",
    "OrderService",
    "OrderSummary",
    "RenderError",
    "SourceUnreadableError",
    "TriggerResult",
    "ValidatedLineItem",
    "fallback_candidate",
    "load_catalog_entries",
]
