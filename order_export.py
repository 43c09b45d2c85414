from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import httpx

from order_submission import Order


def format_inr(amount: int) -> str:
    """
    Format whole rupees with Indian digit grouping, e.g. 1234567 -> "Rs. 12,34,567".

    ReportLab's built-in fonts have no rupee glyph, so the ASCII "Rs." prefix is used everywhere.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be int rupees (got {type(amount).__name__})")
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{sign}Rs. {digits}"


def order_export_payload(order: Order, *, generated_at: Optional[datetime] = None) -> dict[str, object]:
    info = order.basic_info
    units = []
    for unit, price in zip(order.units, order.unit_prices):
        units.append(
            {
                "id": unit.id,
                "name": unit.display_name,
                "kind": unit.kind.value,
                "line_items": [
                    {
                        "code": li.code,
                        "description": li.description,
                        "quantity": li.quantity,
                        "unit_price": li.unit_price,
                        "amount": li.amount,
                    }
                    for li in price.line_items
                ],
                "subtotal": price.subtotal,
            }
        )

    # Human-readable overview for internal notifications (SMS/email).
    line_items_overview = [
        f"{price.display_name}: {li.description} x{li.quantity} = {format_inr(li.amount)}"
        for price in order.unit_prices
        for li in price.line_items
    ]

    return {
        "generated_at": (generated_at or datetime.now(timezone.utc)).isoformat(),
        "order_id": order.order_id,
        "submitted_at": order.submitted_at.isoformat(),
        "contact": {
            "name": info.contact_name or "",
            "email": info.contact_email or "",
            "phone": info.contact_phone or "",
        },
        "property_kind": info.property_kind.value,
        "unit_count": info.unit_count,
        "units": units,
        "line_items_overview": line_items_overview,
        "totals": {
            "subtotal": order.subtotal,
            "tax_rate": order.tax_rate,
            "tax": order.tax,
            "total": order.total,
            "currency": "INR",
        },
    }


def post_order_export(
    *,
    url: str,
    payload: dict[str, object],
    timeout_s: float = 3.0,
    client: Optional[httpx.Client] = None,
) -> tuple[int, str]:
    """
    Best-effort POST of an order payload.

    Returns (status_code, response_text_snippet). On transport failure, returns (0, error_message).
    """
    try:
        if client is not None:
            resp = client.post(url, json=payload, timeout=timeout_s)
        else:
            with httpx.Client(timeout=timeout_s) as owned:
                resp = owned.post(url, json=payload)
        return int(resp.status_code), resp.text[:1200]
    except Exception as exc:
        return 0, str(exc)
