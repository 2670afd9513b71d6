"""Build the pipeline object graph from Settings."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from order_intake.catalog import CatalogIndex
from order_intake.config import Settings
from order_intake.extraction import ChatCompletionClient, LLMOrderExtractor
from order_intake.ingest import IngestionOrchestrator
from order_intake.render import HtmlPdfRenderer
from order_intake.service import OrderService
from order_intake.sources import EmailSource
from order_intake.store import JsonCatalogSnapshot, JsonOrderStore


def build_orchestrator(settings: Settings, store: Optional[JsonOrderStore] = None) -> IngestionOrchestrator:
    if not settings.llm_api_key:
        logger.warning("No LLM API key configured; every email will use the fallback candidate")
    client = ChatCompletionClient(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout_seconds=settings.llm_timeout_seconds,
    )
    return IngestionOrchestrator(
        catalog=CatalogIndex(mirror=JsonCatalogSnapshot(settings.catalog_snapshot_path)),
        catalog_source=settings.catalog_path,
        emails=EmailSource(settings.emails_dir, settings.email_pattern),
        extractor=LLMOrderExtractor(client),
        renderer=HtmlPdfRenderer(settings.output_dir, template_pdf=settings.pdf_template),
        store=store or JsonOrderStore(settings.store_path),
    )


def build_service(settings: Settings) -> OrderService:
    store = JsonOrderStore(settings.store_path)
    return OrderService(store, build_orchestrator(settings, store=store))
