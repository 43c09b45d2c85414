from __future__ import annotations

"""
Smoke test for the configuration wizard (local, offline).

This script simulates "wizard button presses" by sending events to a ConfigurationWizard
one step at a time, then:
- checks the step gating and the running totals
- submits the order
- renders an order PDF (order_pdf) and the export payload (order_export)

It writes PDFs and JSON payloads to `out/smoke_test_demo/` and exits non-zero if anything breaks.

Usage:
  python3 scripts/smoke_test_demo.py
  python3 scripts/smoke_test_demo.py --out-dir out/smoke_test_demo
"""

import argparse
import json
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from tqdm import tqdm

# Allow running as `python3 scripts/smoke_test_demo.py` (module imports live at repo root).
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from configuration_state import ConfigurationError
from configuration_wizard import ConfigurationWizard
from order_export import format_inr, order_export_payload
from order_pdf import make_order_pdf_bytes
from order_submission import Order
from validation import WizardStep


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Step:
    label: str
    apply: Callable[[ConfigurationWizard], None]


def _first_unit_id(w: ConfigurationWizard) -> str:
    return w.view().units[0].unit.id


def _unit_id(index: int) -> Callable[[ConfigurationWizard], str]:
    return lambda w: w.view().units[index].unit.id


def _select(index: int, item_id: str) -> Callable[[ConfigurationWizard], None]:
    return lambda w: w.toggle_selectable(_unit_id(index)(w), item_id, True)


def _add(index: int, item_id: str, delta: int) -> Callable[[ConfigurationWizard], None]:
    return lambda w: w.adjust_quantity(_unit_id(index)(w), item_id, delta)


def _expect_step(step: WizardStep) -> Callable[[ConfigurationWizard], None]:
    def check(w: ConfigurationWizard) -> None:
        if w.step != step:
            raise RuntimeError(f"expected to be on {step.name}, wizard is on {w.step.name}")

    return check


def _contact(name: str, email: str, phone: str) -> Callable[[ConfigurationWizard], None]:
    def apply(w: ConfigurationWizard) -> None:
        w.update_contact_field("name", name)
        w.update_contact_field("email", email)
        w.update_contact_field("phone", phone)

    return apply


def _write_order(order: Order, *, out_dir: Path, label: str) -> None:
    pdf_bytes = make_order_pdf_bytes(order)
    if not pdf_bytes.startswith(b"%PDF"):
        raise RuntimeError("Generated PDF does not start with %PDF header.")
    # Shallow text markers to catch obvious template/render failures.
    for marker in (b"Order Confirmation", b"Subtotal", b"GST"):
        if marker not in pdf_bytes:
            raise RuntimeError(f"Generated PDF missing expected marker: {marker!r}")
    (out_dir / f"{label}.pdf").write_bytes(pdf_bytes)
    (out_dir / f"{label}.json").write_text(json.dumps(order_export_payload(order), indent=2), encoding="utf-8")


def _run_scenario(*, name: str, steps: list[Step], out_dir: Path) -> Order:
    orders: list[Order] = []
    wizard = ConfigurationWizard(on_order=orders.append)
    for step in tqdm(steps, desc=name, unit="event"):
        step.apply(wizard)

    if len(orders) != 1:
        raise RuntimeError(f"scenario {name!r} expected one submitted order, got {len(orders)}")
    order = orders[0]
    if wizard.view().basic_info.unit_count != 1 or wizard.step != WizardStep.BASIC_INFO:
        raise RuntimeError("wizard did not reset after submission")

    label = name.replace(" ", "_").lower()
    _write_order(order, out_dir=out_dir, label=label)
    print(f"  - {name}: {len(order.units)} room(s), total {format_inr(order.total)} -> {label}.pdf")
    return order


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--out-dir",
        default=str(_repo_root() / "out" / "smoke_test_demo"),
        help="Directory to write PDFs into (default: out/smoke_test_demo).",
    )
    args = parser.parse_args(argv)

    out_dir = Path(args.out_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    # Scenario 1: one room, one sensor.
    s1_steps = [
        Step(label="next_from_basic_info", apply=lambda w: w.go_next()),
        Step(label="blocked_without_items", apply=lambda w: w.go_next()),
        Step(label="still_on_details", apply=_expect_step(WizardStep.UNIT_DETAILS)),
        Step(label="select_motion", apply=_select(0, "motion")),
        Step(label="next_to_summary", apply=lambda w: w.go_next()),
        Step(label="on_summary", apply=_expect_step(WizardStep.SUMMARY)),
        Step(label="submit_empty_contact", apply=lambda w: w.submit()),
        Step(label="still_on_summary", apply=_expect_step(WizardStep.SUMMARY)),
        Step(label="fill_contact", apply=_contact("Demo Customer", "demo@example.com", "9876543210")),
        Step(label="submit", apply=lambda w: w.submit()),
    ]

    # Scenario 2: three rooms, shrink to two, devices and renamed rooms.
    s2_steps = [
        Step(label="new_construction", apply=lambda w: w.set_property_kind("new")),
        Step(label="three_rooms", apply=lambda w: w.set_unit_count(3)),
        Step(label="two_rooms", apply=lambda w: w.set_unit_count(2)),
        Step(label="next_from_basic_info", apply=lambda w: w.go_next()),
        Step(label="rename_first", apply=lambda w: w.set_unit_name(_first_unit_id(w), "Living Room")),
        Step(label="kind_first", apply=lambda w: w.set_unit_kind(_first_unit_id(w), "living")),
        Step(label="first_presence", apply=_select(0, "human")),
        Step(label="first_two_dimmers", apply=_add(0, "led", 2)),
        Step(label="second_switches", apply=_add(1, "switch", 3)),
        Step(label="second_air", apply=_select(1, "air")),
        Step(label="next_to_summary", apply=lambda w: w.go_next()),
        Step(label="fill_contact", apply=_contact("Asha", "asha@example.com", "9876543210")),
        Step(label="submit", apply=lambda w: w.submit()),
    ]

    # Scenario 3: the maximum number of rooms, enough rows to paginate the PDF.
    s3_steps = [Step(label="ten_rooms", apply=lambda w: w.set_unit_count(10))]
    s3_steps.append(Step(label="next_from_basic_info", apply=lambda w: w.go_next()))
    for i in range(10):
        for item_id in ("motion", "human", "light", "environment"):
            s3_steps.append(Step(label=f"room_{i}_{item_id}", apply=_select(i, item_id)))
        s3_steps.append(Step(label=f"room_{i}_led", apply=_add(i, "led", 1)))
    s3_steps += [
        Step(label="next_to_summary", apply=lambda w: w.go_next()),
        Step(label="fill_contact", apply=_contact("Whole House", "house@example.com", "9123456780")),
        Step(label="submit", apply=lambda w: w.submit()),
    ]

    print("")
    print("=" * 72)
    _run_scenario(name="single room", steps=s1_steps, out_dir=out_dir)
    _run_scenario(name="two rooms", steps=s2_steps, out_dir=out_dir)
    _run_scenario(name="whole house", steps=s3_steps, out_dir=out_dir)

    print("")
    print(f"OK: wrote orders to {out_dir}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except ConfigurationError as exc:
        print(f"FAIL: ConfigurationError: {exc}", file=sys.stderr)
        raise SystemExit(2)
    except Exception:
        traceback.print_exc()
        raise SystemExit(1)
