from __future__ import annotations

import unittest
from datetime import datetime, timezone

import configuration_state as cs
from configuration_state import initial_state, reconcile_units
from order_pdf import make_order_pdf_bytes
from order_submission import ContactDetails, Order, submit_order

_CONTACT = ContactDetails(name="Demo Customer", email="demo@example.com", phone="9876543210")
_NOW = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)


def _order(room_count: int, items: tuple[str, ...] = ("motion",)) -> Order:
    state = reconcile_units(initial_state(), room_count)
    for unit in state.units:
        for item_id in items:
            state = cs.toggle_selectable(state, unit.id, item_id, True)
    order = submit_order(state, _CONTACT, now=_NOW).order
    assert order is not None
    return order


class TestOrderPdf(unittest.TestCase):
    def _count_pdf_pages(self, pdf: bytes) -> int:
        # Page objects carry "/Type /Page"; the page tree carries "/Type /Pages".
        return max(0, pdf.count(b"/Type /Page") - pdf.count(b"/Type /Pages"))

    def test_make_order_pdf_bytes_returns_pdf(self) -> None:
        order = _order(1)
        pdf = make_order_pdf_bytes(order)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreater(len(pdf), 1000)
        for marker in (b"Order Confirmation", b"Subtotal", b"GST", b"Total", b"CUSTOMER DETAILS"):
            self.assertIn(marker, pdf)
        self.assertIn(f"ORD-{order.order_id}".encode("ascii"), pdf)
        self.assertIn(b"demo@example.com", pdf)
        self.assertIn(b"Rs. 1,416", pdf)
        self.assertEqual(self._count_pdf_pages(pdf), 1)

    def test_company_name_is_rendered(self) -> None:
        pdf = make_order_pdf_bytes(_order(1), company_name="Acme Smart Homes")
        self.assertIn(b"Acme Smart Homes", pdf)

    def test_many_rooms_paginate(self) -> None:
        order = _order(10, items=("motion", "human", "light", "environment", "communication"))
        pdf = make_order_pdf_bytes(order)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreaterEqual(self._count_pdf_pages(pdf), 2)
        self.assertIn(b"CONTINUED", pdf)
        self.assertIn(b"Room 10", pdf)


if __name__ == "__main__":
    unittest.main()
