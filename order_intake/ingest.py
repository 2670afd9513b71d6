"""Batch ingestion: email -> candidate -> validated order -> PDF -> store."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import threading
from typing import Callable, List, Optional, Union
import uuid

from loguru import logger

from order_intake.catalog import CatalogIndex
from order_intake.enrichment import EnrichmentEngine
from order_intake.errors import BatchInProgressError
from order_intake.extraction import OrderExtractor
from order_intake.models import BatchState, EmailOutcome, TriggerResult, summarize_outcomes
from order_intake.render import OrderRenderer
from order_intake.sources import EmailSource
from order_intake.store import OrderStore


def _new_order_id() -> str:
    return str(uuid.uuid4())


class IngestionOrchestrator:
    def __init__(
        self,
        catalog: CatalogIndex,
        catalog_source: Union[str, Path],
        emails: EmailSource,
        extractor: OrderExtractor,
        renderer: OrderRenderer,
        store: OrderStore,
        engine: Optional[EnrichmentEngine] = None,
        id_factory: Callable[[], str] = _new_order_id,
    ) -> None:
        self.catalog = catalog
        self.catalog_source = catalog_source
        self.emails = emails
        self.extractor = extractor
        self.renderer = renderer
        self.store = store
        self.engine = engine or EnrichmentEngine(catalog)
        self.id_factory = id_factory
        self._running = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def run_batch(self) -> List[EmailOutcome]:
        """Run one full batch; raises BatchInProgressError if one is already running."""
        if not self._running.acquire(blocking=False):
            raise BatchInProgressError("A batch run is already in progress.")
        try:
            return self._run_locked()
        finally:
            self._running.release()

    def trigger(self) -> TriggerResult:
        """Start a batch on a background thread without waiting for it."""
        if not self._running.acquire(blocking=False):
            logger.info("Batch trigger ignored: a batch run is already in progress")
            return TriggerResult(status="already_in_progress", message="Refresh already in progress")

        def _worker() -> None:
            try:
                self._run_locked()
            except Exception:
                logger.exception("Background batch run failed")
            finally:
                self._running.release()

        self._thread = threading.Thread(target=_worker, name="order-intake-batch", daemon=True)
        self._thread.start()
        return TriggerResult(status="initiated", message="Refresh initiated")

    def wait(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run_locked(self) -> List[EmailOutcome]:
        logger.info("Starting batch ingestion")
        # Catalog failures are fatal and abort before any order is touched.
        self.catalog.refresh(self.catalog_source)
        self.store.clear()

        files = self.emails.list_files()
        logger.info("Found {} email files", len(files))
        outcomes = [self.process_email(path) for path in files]

        counts = summarize_outcomes(outcomes)
        logger.info(
            "Batch ingestion completed: {} processed, {} persisted, {} failed",
            counts["total"],
            counts["persisted"],
            counts["failed"],
        )
        return outcomes

    def process_email(self, path: Path) -> EmailOutcome:
        source_file = self.emails.display_name(path)
        with logger.contextualize(email=source_file):
            return self._process(path, source_file)

    def _process(self, path: Path, source_file: str) -> EmailOutcome:
        state = BatchState.PENDING
        order_id: Optional[str] = None
        try:
            text = self.emails.read(path)
            candidate = self.extractor.extract(text)
            state = BatchState.EXTRACTED

            order_id = self.id_factory()
            order = self.engine.enrich(candidate, order_id, source_file)
            state = BatchState.ENRICHED

            pdf_path = self.renderer.render(order, self.catalog)
            order = replace(order, pdf_path=pdf_path)
            state = BatchState.RENDERED

            self.store.upsert(order)
            state = BatchState.PERSISTED
        except Exception as exc:
            logger.opt(exception=exc).error("Failed to process {} after state {}", source_file, state.value)
            return EmailOutcome(
                source_file=source_file,
                state=BatchState.FAILED,
                order_id=order_id,
                failed_after=state,
                error=str(exc),
            )

        logger.info(
            "Processed {} -> order {} (confidence {:.1%}, {} items, {} issues)",
            source_file,
            order_id,
            order.overall_confidence,
            len(order.items),
            order.issue_count,
        )
        return EmailOutcome(source_file=source_file, state=state, order_id=order_id)
