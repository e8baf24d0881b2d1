"""
PDF Export - printable attar/perfume price lists and order receipts.

Layout: A4 portrait, title + generation time + notes, then one numbered
section per product with a two-column Size/Price grid.
"""
import io
import logging
from datetime import datetime
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, A6
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable, KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

from ..config.settings import get_settings, Settings
from ..engine.pricing_engine import PricingEngine
from .price_list_service import format_price
from .records_service import Order, Product


logger = logging.getLogger(__name__)

ATTAR_HEADER_COLOR = colors.Color(22 / 255, 160 / 255, 133 / 255)
PERFUME_HEADER_COLOR = colors.Color(99 / 255, 102 / 255, 241 / 255)


def _styles():
    styles = getSampleStyleSheet()
    product = ParagraphStyle('ProductHeader', parent=styles['Heading4'], textColor=ATTAR_HEADER_COLOR)
    return styles, product


def _price_table(head: list[str], rows: list[list[str]], header_color) -> Table:
    table = Table([head] + rows, colWidths=[70 * mm, 70 * mm], hAlign='CENTER')
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), header_color),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    return table


def _build(title: str, notes: Iterable[str], sections: list, generated_at: Optional[datetime]) -> bytes:
    styles, _ = _styles()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, title=title,
        leftMargin=15 * mm, rightMargin=15 * mm, topMargin=15 * mm, bottomMargin=15 * mm,
    )
    stamp = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M')
    story = [
        Paragraph(escape(title), styles['Title']),
        Paragraph(f"Generated: {stamp}", styles['Normal']),
    ]
    for note in notes:
        story.append(Paragraph(escape(note), styles['Normal']))
    story.append(Spacer(1, 6 * mm))
    story.extend(sections)
    doc.build(story)
    return buffer.getvalue()


def _section(no: int, name: str, table: Table, header_style) -> KeepTogether:
    return KeepTogether([
        Paragraph(f"{no}. {escape(name)}", header_style),
        table,
        Spacer(1, 2 * mm),
        HRFlowable(width='100%', thickness=0.7, color=colors.black),
        Spacer(1, 4 * mm),
    ])


def build_attar_price_list(
    products: Iterable[Product],
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Attar list: every product with its stored size/price variants."""
    settings = settings or get_settings()
    _, header_style = _styles()
    sections = []
    for no, product in enumerate(products, start=1):
        rows = [[str(v.get('size', '')), format_price(v.get('price'), settings.currency)] for v in product.variants]
        if not rows:
            rows = [["-", "-"]]
        sections.append(_section(no, product.name, _price_table(["Size", "Price"], rows, ATTAR_HEADER_COLOR), header_style))

    logger.info("Rendering attar price list with %d products", len(sections))
    return _build(f"{settings.shop_name} - Attar Price List", settings.attar_notes, sections, generated_at)


def build_perfume_price_list(
    products: Iterable[Product],
    engine: PricingEngine,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Perfume list: only products with at least one derived price."""
    settings = settings or engine.settings or get_settings()
    _, header_style = _styles()
    sections = []
    for product in products:
        derived = engine.derive_for_product(product)
        if not derived.has_data:
            continue
        rows = [[slot.label, format_price(slot.price, settings.currency)] for slot in derived.slots]
        table = _price_table(["Perfume Size", "Price"], rows, PERFUME_HEADER_COLOR)
        sections.append(_section(len(sections) + 1, product.name, table, header_style))

    logger.info("Rendering perfume price list with %d products", len(sections))
    return _build(f"{settings.shop_name} - Perfume Price List", settings.perfume_notes, sections, generated_at)


def build_order_receipt(order: Order, settings: Optional[Settings] = None) -> bytes:
    """Small-page receipt for one order."""
    settings = settings or get_settings()
    styles = getSampleStyleSheet()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A6, title="Receipt",
                            leftMargin=8 * mm, rightMargin=8 * mm, topMargin=8 * mm, bottomMargin=8 * mm)

    rows = [
        ["Product", order.product_name],
        ["Price", format_price(order.product_price, settings.currency)],
        ["Remaining", format_price(order.remaining_payment, settings.currency)],
        ["Payment", order.payment_method or "-"],
    ]
    if order.description:
        rows.append(["Notes", order.description])
    if order.created_at:
        rows.append(["Date", order.created_at[:10]])

    table = Table(rows, colWidths=[25 * mm, 55 * mm])
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOX', (0, 0), (-1, -1), 0.5, colors.black),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    story = [
        Paragraph(escape(settings.shop_name), styles['Heading3']),
        Paragraph("Order Receipt", styles['Normal']),
        Spacer(1, 4 * mm),
        table,
    ]
    doc.build(story)
    return buffer.getvalue()
