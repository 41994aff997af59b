import asyncio

import pandas as pd
import streamlit as st

# Configuration
from opsconsole.config import get_config
from opsconsole.logging import get_logger

# OrderApi interface + lifecycle engine
from opsconsole.data.models import OrderFilters, RefundDestination
from opsconsole.data.util import get_order_api
from opsconsole.lifecycle import (
    ActionKind,
    NotificationLevel,
    OrderLifecycleController,
    Severity,
    ViewState,
)

st.set_page_config(page_title="Order Lifecycle Console", layout="wide")

config = get_config()
logger = get_logger("opsconsole.app")

SEVERITY_COLORS = {
    Severity.POSITIVE: "green",
    Severity.WARNING: "orange",
    Severity.NEGATIVE: "red",
    Severity.NEUTRAL: "gray",
}
TOAST_ICONS = {
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.WARNING: "⚠️",
    NotificationLevel.ERROR: "❌",
}

# -----------------------------------------------------------------------------
# Backend + controller live in the session so they survive reruns.
# -----------------------------------------------------------------------------
if "controller" not in st.session_state:
    api = get_order_api()
    st.session_state.api = api
    st.session_state.controller = OrderLifecycleController(api)
    st.session_state.page = 1

api = st.session_state.api
controller: OrderLifecycleController = st.session_state.controller


def run(coro):
    """Run one controller coroutine to completion on this script run."""
    return asyncio.run(coro)


def badge(text: str, severity: Severity) -> str:
    return f":{SEVERITY_COLORS[severity]}-background[{text}]"


# -----------------------------------------------------------------------------
# Sidebar: order list
# -----------------------------------------------------------------------------
st.sidebar.header("Orders")

search = st.sidebar.text_input("Search (order, invoice, customer)")
status_options = ["(All)"] + list(controller.catalog.labels.keys())
status_sel = st.sidebar.selectbox("Status", status_options, format_func=lambda s: s if s == "(All)" else controller.catalog.label_of(s))
type_sel = st.sidebar.selectbox("Delivery type", ["(All)", "express", "next-day"])
page_size = st.sidebar.number_input(
    "Orders per page",
    min_value=config.min_page_size,
    max_value=config.max_page_size,
    value=config.orders_page_size,
    step=5,
)

filters = OrderFilters(
    page=st.session_state.page,
    limit=int(page_size),
    search=search or None,
    status=None if status_sel == "(All)" else status_sel,
    delivery_type=None if type_sel == "(All)" else type_sel,
)
orders_page = run(api.list_orders(filters))

if not orders_page.success:
    st.sidebar.error(orders_page.message or "Failed to fetch orders")
else:
    pagination = orders_page.pagination
    rows = pd.DataFrame(
        [
            {
                "id": o.id,
                "invoice": o.invoice_number,
                "status": controller.catalog.label_of(o.status),
                "type": o.delivery_type,
                "created": o.created_at,
            }
            for o in orders_page.data
        ]
    )
    st.sidebar.caption(f"{pagination.total} orders · page {pagination.page} of {pagination.pages}")
    if not rows.empty:
        choice = st.sidebar.radio(
            "Open order",
            rows["id"].tolist(),
            format_func=lambda oid: f"{rows.loc[rows['id'] == oid, 'invoice'].iloc[0] or oid} · "
            f"{rows.loc[rows['id'] == oid, 'status'].iloc[0]}",
            index=None,
        )
        if choice and choice != controller.record.order_id:
            logger.info(f"Opening order {choice}")
            run(controller.load(choice))

    prev_col, next_col = st.sidebar.columns(2)
    if prev_col.button("◀ Prev", disabled=pagination.page <= 1):
        st.session_state.page = pagination.page - 1
        st.rerun()
    if next_col.button("Next ▶", disabled=pagination.page >= pagination.pages):
        st.session_state.page = pagination.page + 1
        st.rerun()

# -----------------------------------------------------------------------------
# Main: order lifecycle
# -----------------------------------------------------------------------------
if controller.view_state == ViewState.IDLE:
    st.info("Select an order from the sidebar.")
elif controller.view_state == ViewState.LOADING:
    st.info("Loading order...")
elif controller.view_state == ViewState.ERROR:
    st.error(controller.error or "Failed to fetch order details")
else:
    order = controller.order

    head_col, refresh_col = st.columns([5, 1])
    head_col.markdown(
        f"### Order {order.invoice_number or order.id} "
        f"{badge(controller.status_label, controller.status_severity)}"
    )
    if refresh_col.button("Refresh", disabled=controller.refreshing):
        run(controller.refresh())
        st.rerun()

    # Pending decision
    if controller.can_accept:
        with st.container(border=True):
            st.warning("This order is pending and requires your action.")
            disabled = controller.control_disabled(ActionKind.ACCEPT)
            accept_col, reject_col = st.columns(2)
            if accept_col.button("Accept Order", type="primary", disabled=disabled):
                run(controller.accept())
                st.rerun()
            if reject_col.button("Reject Order", disabled=disabled):
                run(controller.reject())
                st.rerun()

    info_col, timeline_col = st.columns([1, 1])

    with info_col:
        st.markdown("#### Order summary")
        st.write(
            {
                "Order ID": order.id,
                "Invoice": order.invoice_number,
                "Delivery type": order.delivery_type,
                "Store": getattr(order.store, "name", None) or order.store_ref_id,
                "Placed": order.created_at.isoformat() if order.created_at else "—",
                "Updated": order.updated_at.isoformat() if order.updated_at else "—",
            }
        )
        st.markdown("#### Payment")
        payment = order.payment
        st.markdown(
            f"{payment.method if payment and payment.method else '—'} "
            f"{badge((payment.status if payment and payment.status else 'unknown').capitalize(), controller.payment_severity)}"
        )

        # Refund (returned orders only)
        if controller.can_refund:
            st.markdown("#### Refund")
            wallet_col, account_col = st.columns(2)
            busy = controller.control_disabled(ActionKind.REFUND)
            if wallet_col.button("Refund to wallet", disabled=busy):
                run(controller.refund(RefundDestination.WALLET))
                st.rerun()
            if account_col.button("Refund to account", disabled=busy):
                run(controller.refund(RefundDestination.ACCOUNT))
                st.rerun()

    with timeline_col:
        title_col, edit_col = st.columns([3, 1])
        title_col.markdown("#### Order status timeline")
        if edit_col.button("Cancel" if controller.editing_status else "Edit Status"):
            controller.toggle_status_edit()
            st.rerun()

        if controller.editing_status:
            busy = controller.control_disabled(ActionKind.UPDATE_STATUS)
            target = st.selectbox(
                "Move order to",
                controller.editable_statuses,
                index=None,
                format_func=controller.catalog.label_of,
            )
            if st.button("Update status", disabled=busy or target is None):
                run(controller.update_status(target))
                st.rerun()

        for step in controller.timeline:
            mark = "✅" if step.completed else "⚪"
            current = " **← current**" if step.current else ""
            when = f" · {step.timestamp:%Y-%m-%d %H:%M}" if step.timestamp else ""
            st.markdown(f"{mark} {step.display_label}{when}{current}")

# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------
for note in controller.notifications.drain():
    st.toast(note.message, icon=TOAST_ICONS[note.level])
