"""Confirmation PDF rendering for finished order records."""

from __future__ import annotations

from dataclasses import dataclass
import io
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger
from pypdf import PdfReader, PdfWriter

from order_intake.enrichment import CatalogLookup
from order_intake.errors import RenderError
from order_intake.models import OrderRecord

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
TEMPLATE_NAME = "order_confirmation.html"


class OrderRenderer(Protocol):
    def render(self, order: OrderRecord, catalog: CatalogLookup) -> str:
        ...


@dataclass(frozen=True)
class RenderedLine:
    sku: str
    description: str
    quantity: int
    price: float
    total: float
    issues: Sequence[str]


def _money(value: float) -> str:
    return f"${value:,.2f}"


def build_lines(order: OrderRecord, catalog: CatalogLookup) -> List[RenderedLine]:
    lines: List[RenderedLine] = []
    for item in order.items:
        entry = catalog.exact_lookup(item.sku)
        price = entry.price if entry else 0.0
        lines.append(
            RenderedLine(
                sku=item.sku,
                description=entry.description if entry else "Unknown",
                quantity=item.quantity,
                price=price,
                total=price * item.quantity,
                issues=tuple(item.issues),
            )
        )
    return lines


def _environment(template_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml")),
    )
    env.filters["money"] = _money
    return env


def render_order_html(
    order: OrderRecord,
    catalog: CatalogLookup,
    template_dir: Path = TEMPLATE_DIR,
) -> str:
    lines = build_lines(order, catalog)
    context: Dict[str, Any] = {
        "order": order,
        "order_date": order.processed_at.date().isoformat(),
        "lines": lines,
        "grand_total": sum(line.total for line in lines),
    }
    return _environment(template_dir).get_template(TEMPLATE_NAME).render(**context)


def _html_to_pdf_bytes(html_content: str, base_path: Path) -> bytes:
    from weasyprint import HTML  # local import: needs system pango libraries at import time

    pdf_content = HTML(string=html_content, base_url=base_path.as_uri()).write_pdf()
    if not pdf_content:
        raise RenderError("Failed to generate PDF content from HTML.")
    return pdf_content


def overlay_on_template(pdf_bytes: bytes, template_pdf: Path) -> bytes:
    """Draw the first rendered page on top of the template's first page."""
    template_page = PdfReader(str(template_pdf)).pages[0]
    rendered = PdfReader(io.BytesIO(pdf_bytes))
    writer = PdfWriter()
    page = writer.add_page(template_page)
    page.merge_page(rendered.pages[0])
    for extra in rendered.pages[1:]:
        writer.add_page(extra)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


class HtmlPdfRenderer:
    def __init__(
        self,
        output_dir: Union[str, Path],
        template_pdf: Optional[Union[str, Path]] = None,
        template_dir: Path = TEMPLATE_DIR,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.template_pdf = Path(template_pdf) if template_pdf else None
        self.template_dir = template_dir

    def render(self, order: OrderRecord, catalog: CatalogLookup) -> str:
        try:
            html_content = render_order_html(order, catalog, self.template_dir)
            pdf_content = _html_to_pdf_bytes(html_content, self.template_dir)
            if self.template_pdf is not None:
                pdf_content = overlay_on_template(pdf_content, self.template_pdf)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            output_path = self.output_dir / f"{order.order_id}.pdf"
            output_path.write_bytes(pdf_content)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"PDF generation failed for order {order.order_id}: {exc}") from exc
        logger.debug("Rendered {} ({} bytes)", output_path, len(pdf_content))
        return str(output_path)
