from __future__ import annotations

import json
import os

import streamlit as st
from dotenv import load_dotenv

from app_config import AppConfig, load_config
from configuration_wizard import ConfigurationWizard, UnitView, WizardView
from debug_log import configure_debug_log
from line_item_catalog import PropertyKind, UnitKind
from order_export import format_inr, order_export_payload, post_order_export
from order_pdf import make_order_pdf_bytes
from order_submission import Order
from validation import WizardStep


def _read_secret_or_env_str(key: str) -> str:
    """
    Read a configuration value from Streamlit Secrets (preferred) or environment variables.

    Returns a stripped string; returns "" when missing.
    """
    val: object = ""
    try:
        # `st.secrets` is Mapping-like; `.get` is supported in Streamlit.
        val = st.secrets.get(key, "")  # type: ignore[attr-defined]
    except Exception:
        val = ""
    if not val:
        val = os.environ.get(key, "")
    if isinstance(val, str):
        return val.strip()
    return str(val).strip() if val is not None else ""


def _app_config() -> AppConfig:
    cfg = st.session_state.get("_app_config")
    if isinstance(cfg, AppConfig):
        return cfg
    load_dotenv()
    cfg = load_config(read=_read_secret_or_env_str)
    configure_debug_log(cfg.debug_log_path)
    st.session_state["_app_config"] = cfg
    return cfg


def _widget_key(name: str) -> str:
    # Widget keys carry an epoch so a fresh configuration never inherits stale widget values.
    return f"w{int(st.session_state.get('widget_epoch') or 0)}_{name}"


def _on_order_submitted(order: Order) -> None:
    """
    Hand the finished order to the outside world: JSON payload, PDF, and the optional export POST.
    """
    cfg = _app_config()
    payload = order_export_payload(order)
    export: dict[str, object] = {"order_id": order.order_id, "total": order.total, "payload": payload}
    try:
        export["pdf_bytes"] = make_order_pdf_bytes(order, company_name=cfg.company_name)
        export["pdf_error"] = None
    except Exception as exc:
        export["pdf_bytes"] = None
        export["pdf_error"] = str(exc)

    if cfg.export_url:
        status, resp_text = post_order_export(url=cfg.export_url, payload=payload, timeout_s=cfg.export_timeout_s)
        export["post_status"] = int(status)
        export["post_response"] = str(resp_text or "")
    else:
        export["post_status"] = 0
        export["post_response"] = "ORDER_EXPORT_URL not set; skipped POST."
    st.session_state["last_export"] = export


def _wizard() -> ConfigurationWizard:
    wizard = st.session_state.get("wizard")
    if isinstance(wizard, ConfigurationWizard):
        return wizard
    cfg = _app_config()
    wizard = ConfigurationWizard(max_units=cfg.max_units, tax_rate=cfg.tax_rate, on_order=_on_order_submitted)
    st.session_state["wizard"] = wizard
    st.session_state.setdefault("widget_epoch", 0)
    return wizard


def _render_basic_info_step(wizard: ConfigurationWizard, view: WizardView) -> None:
    kinds = list(PropertyKind)
    kind = st.radio(
        "Property Type",
        options=kinds,
        index=kinds.index(view.basic_info.property_kind),
        format_func=lambda k: k.label,
        horizontal=True,
        key=_widget_key("property_kind"),
    )
    if kind != view.basic_info.property_kind:
        wizard.set_property_kind(kind)

    counts = list(range(1, wizard.max_units + 1))
    count = st.selectbox(
        "Number of Rooms",
        options=counts,
        index=counts.index(view.basic_info.unit_count),
        format_func=lambda n: f"{n} {'Room' if n == 1 else 'Rooms'}",
        key=_widget_key("unit_count"),
    )
    if count != view.basic_info.unit_count:
        wizard.set_unit_count(count)
        st.rerun()


def _render_unit_card(wizard: ConfigurationWizard, unit_view: UnitView) -> None:
    unit = unit_view.unit
    with st.container(border=True):
        title = unit.display_name.strip() or "Unnamed Room"
        st.markdown(f"#### {title}: {unit.kind.label} ({format_inr(unit_view.subtotal)})")

        left, right = st.columns(2)
        name = left.text_input("Room Name", value=unit.display_name, key=_widget_key(f"name_{unit.id}"))
        if name != unit.display_name:
            wizard.set_unit_name(unit.id, name)
        kinds = list(UnitKind)
        kind = right.selectbox(
            "Room Type",
            options=kinds,
            index=kinds.index(unit.kind),
            format_func=lambda k: k.label,
            key=_widget_key(f"kind_{unit.id}"),
        )
        if kind != unit.kind:
            wizard.set_unit_kind(unit.id, kind)

        st.markdown("**Sensors**")
        for item in unit.selectables:
            checked = st.checkbox(
                f"{item.label} ({format_inr(item.unit_price)})",
                value=item.selected,
                help=item.description,
                key=_widget_key(f"sel_{unit.id}_{item.id}"),
            )
            if checked != item.selected:
                wizard.toggle_selectable(unit.id, item.id, checked)

        st.markdown("**Devices**")
        for item in unit.quantities:
            c1, c2, c3, c4 = st.columns([5, 1, 1, 1])
            c1.markdown(f"{item.label} ({format_inr(item.unit_price)} each)")
            if c2.button("-", key=_widget_key(f"dec_{unit.id}_{item.id}"), disabled=item.quantity == 0):
                wizard.adjust_quantity(unit.id, item.id, -1)
                st.rerun()
            c3.markdown(f"**{item.quantity}**")
            if c4.button("+", key=_widget_key(f"inc_{unit.id}_{item.id}")):
                wizard.adjust_quantity(unit.id, item.id, 1)
                st.rerun()


def _render_unit_details_step(wizard: ConfigurationWizard, view: WizardView) -> None:
    for unit_view in view.units:
        _render_unit_card(wizard, unit_view)


def _render_summary_step(wizard: ConfigurationWizard, view: WizardView) -> None:
    info = view.basic_info
    st.markdown(f"**Property:** {info.property_kind.label}  \n**Rooms:** {info.unit_count}")
    for unit_view in view.units:
        unit = unit_view.unit
        st.markdown(f"#### {unit.display_name} ({unit.kind.label}): {format_inr(unit_view.subtotal)}")
        rows = [
            {
                "Item": li.description,
                "Qty": li.quantity,
                "Price": format_inr(li.unit_price),
                "Amount": format_inr(li.amount),
            }
            for li in unit_view.line_items
        ]
        if rows:
            st.dataframe(rows, use_container_width=True, hide_index=True)

    st.markdown("### Contact details")
    labels = {"name": "Name", "email": "Email", "phone": "Phone (10 digits)"}
    messages = {
        "name": "Please enter your name.",
        "email": "Please enter a valid email address.",
        "phone": "Phone number must be exactly 10 digits.",
    }
    errors = view.field_errors.as_dict()
    for field_name, label in labels.items():
        current = str(getattr(view.contact, field_name))
        value = st.text_input(label, value=current, key=_widget_key(f"contact_{field_name}"))
        if value != current:
            wizard.update_contact_field(field_name, value)
        elif errors.get(field_name):
            st.error(messages[field_name])


def _render_step_controls(wizard: ConfigurationWizard, view: WizardView) -> None:
    col1, col2, _ = st.columns([1, 1, 6])
    if col1.button("Back", key=f"wizard_back_{int(view.step)}", disabled=not view.can_go_back, use_container_width=True):
        wizard.go_back()
        st.rerun()

    if view.can_go_next:
        if col2.button("Next", key=f"wizard_next_{int(view.step)}", use_container_width=True):
            wizard.go_next()
            st.rerun()
    elif view.can_submit:
        if col2.button("Submit Order", key="wizard_submit", type="primary", use_container_width=True):
            result = wizard.submit()
            if result is not None and result.ok:
                st.session_state["widget_epoch"] = int(st.session_state.get("widget_epoch") or 0) + 1
            st.rerun()


def _render_sidebar(view: WizardView, config: AppConfig) -> None:
    st.sidebar.markdown("### Progress")
    for idx, label in enumerate(view.step_labels):
        marker = "✅" if idx < int(view.step) else ("➡️" if idx == int(view.step) else "▫️")
        st.sidebar.markdown(f"{marker} {label}")

    st.sidebar.markdown("### Estimate")
    for unit_view in view.units:
        st.sidebar.markdown(f"{unit_view.unit.display_name or 'Unnamed Room'}: {format_inr(unit_view.subtotal)}")
    st.sidebar.metric("Subtotal", format_inr(view.totals.subtotal))
    st.sidebar.metric(f"GST ({float(config.tax_rate) * 100:g}%)", format_inr(view.totals.tax))
    st.sidebar.metric("Total", format_inr(view.totals.total))


def _render_last_export() -> None:
    export = st.session_state.get("last_export")
    if not isinstance(export, dict):
        return
    total = export.get("total")
    st.success(
        f"Your configuration has been submitted successfully! Order ORD-{export.get('order_id')}"
        + (f", total {format_inr(int(total))}." if isinstance(total, int) else ".")
    )
    post_status = int(export.get("post_status") or 0)
    post_resp = str(export.get("post_response") or "")
    if 200 <= post_status < 300:
        st.success(f"Export POST succeeded (HTTP {post_status}).")
    elif post_status == 0 and post_resp:
        st.info(post_resp)
    elif post_status:
        st.warning(f"Export POST returned HTTP {post_status}.")

    pdf_bytes = export.get("pdf_bytes")
    if isinstance(pdf_bytes, (bytes, bytearray)):
        st.download_button(
            "Download order (PDF)",
            data=bytes(pdf_bytes),
            file_name=f"order-{export.get('order_id')}.pdf",
            mime="application/pdf",
        )
    elif export.get("pdf_error"):
        st.error(f"Could not generate PDF: {export.get('pdf_error')}")
    st.download_button(
        "Download order (JSON)",
        data=json.dumps(export.get("payload"), indent=2),
        file_name=f"order-{export.get('order_id')}.json",
        mime="application/json",
    )
    if st.button("Dismiss", key="dismiss_last_export"):
        st.session_state.pop("last_export", None)
        st.rerun()


def main() -> None:
    st.set_page_config(page_title="Home Automation Configuration Wizard", layout="wide")
    st.title("Home Automation Configuration Wizard")
    st.caption("Customize your smart home setup in just a few steps")

    config = _app_config()
    wizard = _wizard()
    _render_last_export()

    view = wizard.view()
    st.markdown(f"## {view.step.label}")
    if view.step == WizardStep.BASIC_INFO:
        _render_basic_info_step(wizard, view)
    elif view.step == WizardStep.UNIT_DETAILS:
        _render_unit_details_step(wizard, view)
    else:
        _render_summary_step(wizard, view)

    # Widgets above may have applied events; render controls and totals from the latest state.
    view = wizard.view()
    if view.navigation_message:
        st.warning(view.navigation_message)
    _render_step_controls(wizard, view)
    _render_sidebar(view, config)
    st.caption("All prices are in Indian Rupees (INR) and include GST")


if __name__ == "__main__":
    main()
