from datetime import datetime, timezone
import io
from pathlib import Path

import pytest
from pypdf import PdfReader, PdfWriter

from order_intake import render
from order_intake.catalog import CatalogIndex
from order_intake.errors import RenderError
from order_intake.models import CatalogEntry, CustomerInfo, DeliveryInfo, OrderRecord, ValidatedLineItem
from order_intake.render import HtmlPdfRenderer, build_lines, overlay_on_template, render_order_html


def _catalog() -> CatalogIndex:
    return CatalogIndex(
        [CatalogEntry(sku="DSK-0001", description="Desk TRÄNHOLM 19", price=902.78, stock=31, min_order_qty=2)]
    )


def _order() -> OrderRecord:
    return OrderRecord(
        order_id="order-42",
        source_file="sample_email_1.txt",
        processed_at=datetime(2025, 6, 1, 9, 30, tzinfo=timezone.utc),
        customer=CustomerInfo(name="Jane <Roe>", address="1 Main St"),
        delivery=DeliveryInfo(date="2025-06-20", address="Dock 4"),
        items=(
            ValidatedLineItem(sku="DSK-0001", quantity=2, confidence=0.9),
            ValidatedLineItem(
                sku="Velvet Sofa",
                quantity=1,
                confidence=0.1,
                issues=('Product "Velvet Sofa" not found in catalog',),
            ),
        ),
        overall_confidence=0.5,
    )


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def test_build_lines_prices_from_catalog() -> None:
    lines = build_lines(_order(), _catalog())

    assert lines[0].description == "Desk TRÄNHOLM 19"
    assert lines[0].total == pytest.approx(1805.56)
    assert lines[1].description == "Unknown"
    assert lines[1].total == 0.0


def test_html_contains_order_details_and_escapes_text() -> None:
    html = render_order_html(_order(), _catalog())

    assert "Order ID: order-42" in html
    assert "Date: 2025-06-01" in html
    assert "Jane &lt;Roe&gt;" in html
    assert "$902.78" in html
    assert "Grand Total: $1,805.56" in html
    assert "Issues: Product &#34;Velvet Sofa&#34; not found in catalog" in html
    assert "Confidence: 50.0%" in html


def test_render_writes_pdf_named_after_order(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(render, "_html_to_pdf_bytes", lambda html, base: b"%PDF-1.7 fake")

    path = HtmlPdfRenderer(tmp_path / "generated").render(_order(), _catalog())

    assert path == str(tmp_path / "generated" / "order-42.pdf")
    assert Path(path).read_bytes() == b"%PDF-1.7 fake"


def test_render_failure_is_wrapped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(html: str, base: Path) -> bytes:
        raise OSError("cannot load fonts")

    monkeypatch.setattr(render, "_html_to_pdf_bytes", boom)

    with pytest.raises(RenderError, match="order-42"):
        HtmlPdfRenderer(tmp_path).render(_order(), _catalog())
    assert not (tmp_path / "order-42.pdf").exists()


def test_overlay_uses_template_first_page(tmp_path: Path) -> None:
    template = tmp_path / "form.pdf"
    template.write_bytes(_blank_pdf())

    merged = overlay_on_template(_blank_pdf(), template)

    reader = PdfReader(io.BytesIO(merged))
    assert len(reader.pages) == 1
