from __future__ import annotations

from typing import List, Optional

import pandas as pd
import streamlit as st

from order_intake.config import Settings
from order_intake.errors import DocumentNotFoundError, OrderNotFoundError
from order_intake.logging_config import configure_logging
from order_intake.models import OrderRecord, OrderSummary, line_items_to_rows
from order_intake.service import OrderService
from order_intake.store import JsonCatalogSnapshot
from order_intake.wiring import build_service

REVIEW_THRESHOLD = 0.75

SUMMARY_COLUMNS: List[str] = [
    "id",
    "sourceFile",
    "processedAt",
    "customerName",
    "overallConfidence",
    "pdfPath",
]


st.set_page_config(page_title="Order Intake", page_icon="OI", layout="wide")


CSS = """
<style>
.stApp {
    background: linear-gradient(180deg, #f4f7fb 0%, #edf2f8 100%);
}
.block-card {
    background: rgba(255, 255, 255, 0.78);
    border: 1px solid rgba(20, 40, 70, 0.08);
    border-radius: 18px;
    padding: 18px;
    box-shadow: 0 10px 35px rgba(12, 35, 64, 0.08);
}
.hero {
    background: linear-gradient(135deg, #0f4c75 0%, #1f7a8c 70%, #f57c00 100%);
    color: white;
    border-radius: 24px;
    padding: 22px;
}
.small-muted {
    color: #234;
    opacity: .8;
    font-size: 0.9rem;
}
</style>
"""


@st.cache_resource
def _service() -> OrderService:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return build_service(settings)


def _render_header() -> None:
    st.markdown(CSS, unsafe_allow_html=True)
    st.markdown(
        """
        <div class="hero">
            <h1 style="margin: 0;">Order Intake Review</h1>
            <p style="margin: 4px 0 0 0; font-size: 1.02rem;">
                Orders extracted from customer emails, checked against the product catalog.
            </p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def _summaries_frame(summaries: List[OrderSummary]) -> pd.DataFrame:
    if not summaries:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    out = pd.DataFrame([s.to_dict() for s in summaries])
    out["needsReview"] = out["overallConfidence"] < REVIEW_THRESHOLD
    out["overallConfidence"] = (out["overallConfidence"] * 100).round(1)
    return out


def _refresh_controls(service: OrderService) -> None:
    if service.refresh_running:
        st.info("Batch ingestion is running.")
    if st.button("Re-process emails", use_container_width=True, type="primary"):
        result = service.request_refresh()
        if result.started:
            st.success(result.message)
        else:
            st.warning(result.message)


def _order_detail(service: OrderService, order_id: str) -> None:
    try:
        order: OrderRecord = service.get_order(order_id)
    except OrderNotFoundError as exc:
        st.error(str(exc))
        return

    st.markdown('<div class="block-card">', unsafe_allow_html=True)
    st.subheader(order.customer.name)
    col1, col2, col3 = st.columns(3)
    col1.metric("Confidence", f"{order.overall_confidence * 100:.1f}%")
    col2.metric("Items", len(order.items))
    col3.metric("Issues", order.issue_count)
    if order.overall_confidence < REVIEW_THRESHOLD:
        st.warning("Low confidence order: needs human review.")

    st.write(f"**Customer address:** {order.customer.address}")
    st.write(f"**Delivery:** {order.delivery.date} | {order.delivery.address}")
    st.caption(f"Source: {order.source_file} | processed {order.processed_at.isoformat()}")

    st.dataframe(pd.DataFrame(line_items_to_rows(order.items)), use_container_width=True)

    try:
        pdf_bytes = service.get_pdf(order_id)
    except DocumentNotFoundError:
        st.info("No PDF available for this order.")
    else:
        st.download_button(
            "Download PDF",
            data=pdf_bytes,
            file_name=f"{order.order_id}.pdf",
            mime="application/pdf",
        )
    st.markdown("</div>", unsafe_allow_html=True)


def _orders_tab(service: OrderService) -> None:
    _refresh_controls(service)
    summaries = service.list_orders()
    frame = _summaries_frame(summaries)
    if frame.empty:
        st.info("No orders yet. Run a batch to ingest the sample emails.")
        return
    st.dataframe(frame, use_container_width=True)

    labels = {s.id: f"{s.customer_name} ({s.source_file})" for s in summaries}
    selected: Optional[str] = st.selectbox(
        "Order",
        options=list(labels),
        format_func=lambda order_id: labels[order_id],
    )
    if selected:
        _order_detail(service, selected)


def _catalog_tab() -> None:
    snapshot = JsonCatalogSnapshot(Settings.from_env().catalog_snapshot_path)
    entries = snapshot.load()
    if not entries:
        st.info("Catalog snapshot is empty. It is written on every batch run.")
        return
    query = st.text_input("Filter")
    frame = pd.DataFrame([e.to_dict() for e in entries])
    if query.strip():
        needle = query.strip().lower()
        mask = frame["sku"].str.lower().str.contains(needle, regex=False) | frame[
            "description"
        ].str.lower().str.contains(needle, regex=False)
        frame = frame[mask]
    st.dataframe(frame, use_container_width=True)


def main() -> None:
    _render_header()
    st.markdown('<p class="small-muted">Orders are listed newest first.</p>', unsafe_allow_html=True)
    service = _service()

    tab1, tab2 = st.tabs(["Orders", "Catalog"])
    with tab1:
        _orders_tab(service)
    with tab2:
        _catalog_tab()


if __name__ == "__main__":
    main()
