from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from order_export import format_inr
from order_submission import Order

_ROW_H = 0.27 * inch
_TOTALS_BOX_W = 2.6 * inch
_TOTALS_BOX_H = 1.05 * inch


@dataclass(frozen=True)
class _Row:
    description: str
    qty: Optional[int]
    amount: int
    heading: bool = False


def _order_rows(order: Order) -> Tuple[_Row, ...]:
    rows: List[_Row] = []
    for unit, price in zip(order.units, order.unit_prices):
        title = f"{unit.display_name.strip() or 'Unnamed Room'} ({unit.kind.label})"
        rows.append(_Row(description=title, qty=None, amount=price.subtotal, heading=True))
        for li in price.line_items:
            rows.append(_Row(description=f"    {li.description}", qty=li.quantity, amount=li.amount))
    return tuple(rows)


def make_order_pdf_bytes(order: Order, *, company_name: str = "Smart Home Automation") -> bytes:
    """
    Render an order confirmation PDF.

    Page 1 carries the header, customer block and the start of the line-item table; the
    table continues on further pages as needed and the totals box follows the last row.
    """
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    # Disable page compression so tests can find text markers in the bytes.
    c.setPageCompression(0)
    w, h = letter

    margin = 0.6 * inch
    x0 = margin
    y_top = h - margin
    pad = 0.15 * inch
    footer_y = margin + 0.2 * inch

    # Header band
    header_h = 1.2 * inch
    _rect(c, x0, y_top - header_h, w - 2 * margin, header_h)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(x0 + pad, y_top - 0.40 * inch, company_name)
    c.setFont("Helvetica", 9)
    c.drawString(x0 + pad, y_top - 0.62 * inch, "Home automation configuration")

    box_w = 2.4 * inch
    box_x = w - margin - box_w
    c.setFont("Helvetica-Bold", 10)
    c.drawString(box_x, y_top - 0.35 * inch, "Order Confirmation")
    c.drawString(box_x, y_top - 0.57 * inch, f"ORD-{order.order_id}")
    c.setFont("Helvetica", 9)
    c.drawString(box_x, y_top - 0.79 * inch, f"Date: {order.submitted_at.date().isoformat()}")
    c.setFont("Helvetica-Bold", 11)
    c.drawString(box_x, y_top - 1.02 * inch, f"Total: {format_inr(order.total)}")

    # Customer block
    y = y_top - header_h - 0.25 * inch
    block_h = 1.1 * inch
    block_w = w - 2 * margin
    _rect(c, x0, y - block_h, block_w, block_h)
    info = order.basic_info
    c.setFont("Helvetica-Bold", 9)
    c.drawString(x0 + pad, y - 0.25 * inch, "CUSTOMER DETAILS")
    c.setFont("Helvetica", 9)
    half = block_w / 2.0
    _draw_truncated(c, x0 + pad, y - 0.50 * inch, info.contact_name or "-", max_width=half - 2 * pad)
    _draw_truncated(c, x0 + pad, y - 0.70 * inch, info.contact_email or "-", max_width=half - 2 * pad)
    _draw_truncated(c, x0 + pad, y - 0.90 * inch, info.contact_phone or "-", max_width=half - 2 * pad)
    c.drawString(x0 + half, y - 0.50 * inch, f"Property: {info.property_kind.label}")
    c.drawString(x0 + half, y - 0.70 * inch, f"Rooms: {info.unit_count}")

    table_top_y = y - block_h - 0.25 * inch
    remaining = list(_order_rows(order))
    while True:
        remaining, row_y = _render_rows_page(c, rows=remaining, x0=x0, margin=margin, pad=pad, page_w=w,
                                             table_top_y=table_top_y, bottom_y=footer_y + 0.25 * inch)
        if not remaining:
            break
        c.showPage()
        table_top_y = (h - margin) - 0.40 * inch
        c.setFont("Helvetica-Bold", 10)
        c.drawString(x0, (h - margin) - 0.15 * inch, "LINE ITEMS (CONTINUED)")

    # The totals box needs its full height plus a row of clearance below the last item.
    if row_y - _ROW_H - _TOTALS_BOX_H < footer_y + 0.25 * inch:
        c.showPage()
        row_y = (h - margin) - 0.25 * inch
    _render_totals(c, order=order, right_x=w - margin, top_y=row_y - 0.5 * _ROW_H)

    c.setFont("Helvetica", 8)
    c.setFillColor(colors.grey)
    c.drawString(x0, footer_y, "All prices are in Indian Rupees (INR). GST is included in the total.")
    c.setFillColor(colors.black)

    c.showPage()
    c.save()
    return buf.getvalue()


def _render_rows_page(
    c: canvas.Canvas,
    *,
    rows: List[_Row],
    x0: float,
    margin: float,
    pad: float,
    page_w: float,
    table_top_y: float,
    bottom_y: float,
) -> Tuple[List[_Row], float]:
    """
    Render as many rows as fit above `bottom_y`.

    Returns the rows that did not fit and the y position below the last rendered row.
    """
    c.setFont("Helvetica-Bold", 9)
    c.drawString(x0 + pad, table_top_y - 0.20 * inch, "DESCRIPTION")
    c.drawRightString(page_w - margin - 1.4 * inch, table_top_y - 0.20 * inch, "QTY")
    c.drawRightString(page_w - margin - 0.15 * inch, table_top_y - 0.20 * inch, "AMOUNT")
    _hline(c, x0, page_w - margin, table_top_y - 0.30 * inch)

    desc_max_w = (page_w - 2 * margin) - (1.55 * inch + 0.20 * inch)
    row_y = table_top_y - 0.50 * inch
    rendered = 0
    for row in rows:
        if row_y < bottom_y:
            break
        c.setFont("Helvetica-Bold" if row.heading else "Helvetica", 9)
        _draw_truncated(c, x0 + pad, row_y, row.description, max_width=desc_max_w)
        if row.qty is not None:
            c.drawRightString(page_w - margin - 1.4 * inch, row_y, str(row.qty))
        c.drawRightString(page_w - margin - 0.15 * inch, row_y, format_inr(row.amount))
        row_y -= _ROW_H
        rendered += 1
    return list(rows[rendered:]), row_y


def _render_totals(c: canvas.Canvas, *, order: Order, right_x: float, top_y: float) -> None:
    tx = right_x - _TOTALS_BOX_W
    _rect(c, tx, top_y - _TOTALS_BOX_H, _TOTALS_BOX_W, _TOTALS_BOX_H)
    y_cursor = top_y - 0.28 * inch
    c.setFont("Helvetica", 9)
    _totals_row(c, tx, y_cursor, "Subtotal", order.subtotal)
    y_cursor -= 0.22 * inch
    _totals_row(c, tx, y_cursor, f"GST ({_percent(order.tax_rate)})", order.tax)
    y_cursor -= 0.30 * inch
    c.setFont("Helvetica-Bold", 10)
    _totals_row(c, tx, y_cursor, "Total", order.total)


def _percent(rate: str) -> str:
    try:
        return f"{float(rate) * 100:g}%"
    except ValueError:
        return rate


def _rect(c: canvas.Canvas, x: float, y: float, w: float, h: float) -> None:
    c.rect(x, y, w, h, stroke=1, fill=0)


def _hline(c: canvas.Canvas, x1: float, x2: float, y: float) -> None:
    c.line(x1, y, x2, y)


def _totals_row(c: canvas.Canvas, x: float, y: float, label: str, amount: int) -> None:
    """
    Draw one label/value row inside the totals box.

    The label is truncated so it never collides with the right-aligned amount.
    """
    left_pad = 0.12 * inch
    right_pad = 0.12 * inch
    gap = 0.10 * inch
    amount_txt = format_inr(amount)
    amount_w = c.stringWidth(amount_txt)
    label_max = _TOTALS_BOX_W - left_pad - right_pad - amount_w - gap
    _draw_truncated(c, x + left_pad, y, label, max_width=max(0.0, label_max))
    c.drawRightString(x + _TOTALS_BOX_W - right_pad, y, amount_txt)


def _draw_truncated(c: canvas.Canvas, x: float, y: float, text: str, *, max_width: float) -> None:
    """
    Draw text truncated with an ASCII ellipsis so it stays inside a box.
    """
    t = (text or "").rstrip()
    if not t.strip() or max_width <= 0:
        return
    if c.stringWidth(t) <= max_width:
        c.drawString(x, y, t)
        return
    ell = "..."
    lo = 0
    hi = len(t)
    best = ""
    while lo <= hi:
        mid = (lo + hi) // 2
        cand = (t[:mid].rstrip() + ell) if mid < len(t) else t
        if c.stringWidth(cand) <= max_width:
            best = cand
            lo = mid + 1
        else:
            hi = mid - 1
    if best:
        c.drawString(x, y, best)
