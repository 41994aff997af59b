import dataclasses

import pytest

from opsconsole.data.models import OrderStatus
from opsconsole.lifecycle.catalog import Severity, StatusCatalog, default_catalog


@pytest.fixture
def catalog():
    return StatusCatalog()


def test_labels_for_known_statuses(catalog):
    assert catalog.label_of("pending") == "Order Placed"
    assert catalog.label_of("ready_to_pickup") == "Ready for Pickup"
    assert catalog.label_of("accepted_by_delivery_partner") == "Accepted by Delivery Agent"
    assert catalog.label_of("rejected") == "Rejected"


def test_every_enum_value_has_a_label(catalog):
    for status in OrderStatus:
        assert catalog.label_of(status.value) != status.value


def test_unknown_status_label_is_raw_value(catalog):
    assert catalog.label_of("awaiting_cold_chain_check") == "awaiting_cold_chain_check"


@pytest.mark.parametrize(
    "status, expected",
    [
        ("accepted", Severity.POSITIVE),
        ("Confirmed", Severity.POSITIVE),
        ("PENDING", Severity.WARNING),
        ("rejected", Severity.NEGATIVE),
        (" Cancelled ", Severity.NEGATIVE),
        ("delivered", Severity.POSITIVE),
        ("returned", Severity.WARNING),
        ("refunded", Severity.NEUTRAL),
        ("something_new", Severity.NEUTRAL),
        (None, Severity.NEUTRAL),
    ],
)
def test_severity_is_case_insensitive_with_neutral_default(catalog, status, expected):
    assert catalog.severity_of(status) == expected


def test_payment_severity(catalog):
    assert catalog.payment_severity_of("pending") == Severity.WARNING
    assert catalog.payment_severity_of("Paid") == Severity.POSITIVE
    assert catalog.payment_severity_of("completed") == Severity.POSITIVE
    assert catalog.payment_severity_of("failed") == Severity.NEGATIVE
    assert catalog.payment_severity_of("refunded") == Severity.NEUTRAL


def test_display_flow_is_fixed_seven_steps(catalog):
    assert catalog.display_flow == (
        "pending",
        "accepted",
        "ready_to_pickup",
        "accepted_by_delivery_partner",
        "picked_up",
        "out_for_delivery",
        "delivered",
    )
    assert catalog.display_flow_for("express") == catalog.display_flow_for("next-day") == catalog.display_flow


def test_editable_set_is_flow_plus_exceptions_without_rejected(catalog):
    assert catalog.editable == catalog.display_flow + ("cancelled", "returned", "refunded")
    assert not catalog.is_editable("rejected")
    assert catalog.is_editable("refunded")


def test_flow_index(catalog):
    assert catalog.flow_index("pending") == 0
    assert catalog.flow_index("delivered") == 6
    assert catalog.flow_index("cancelled") == -1


def test_catalog_is_immutable(catalog):
    with pytest.raises(dataclasses.FrozenInstanceError):
        catalog.display_flow = ("pending",)
    with pytest.raises(TypeError):
        catalog.labels["pending"] = "Placed"


def test_alternate_catalog_can_be_injected():
    custom = StatusCatalog(
        labels={"pending": "Waiting"},
        display_flow=["pending", "delivered"],
        editable=["pending", "delivered"],
        severities={"Waiting": Severity.WARNING},
    )
    assert custom.label_of("pending") == "Waiting"
    assert custom.label_of("accepted") == "accepted"
    assert custom.display_flow == ("pending", "delivered")
    assert custom.severity_of("waiting") == Severity.WARNING
    # the default is untouched
    assert default_catalog().label_of("pending") == "Order Placed"
