import pytest

from opsconsole.backend.seed_data import write_csv
from opsconsole.config import set_config_for_test
from opsconsole.data.backends.csv_backend import REQUIRED_COLUMNS


def order_row(order_id, status, **extra):
    row = {
        "order_id": order_id,
        "invoice_number": f"INV-{order_id}",
        "store_id": "ST-001",
        "store_name": "Marina Fresh Catch",
        "customer_name": "Rajesh Kumar",
        "status": status,
        "delivery_type": "express",
        "payment_method": "card",
        "payment_status": "paid",
        "grand_total": "120.00",
        "created_at": "2025-11-29T10:30:00+00:00",
        "updated_at": "2025-11-29T10:30:00+00:00",
    }
    row.update(extra)
    return row


@pytest.fixture(autouse=True)
def quiet_config():
    set_config_for_test(log_level="WARNING", api_base_url="https://orders.test")
    yield


@pytest.fixture
def data_dir(tmp_path):
    rows = [
        order_row("o-pending", "pending", created_at="2025-11-29T09:00:00+00:00"),
        order_row("o-accepted", "accepted", delivery_type="next-day", customer_name="Aisha Rahman",
                  created_at="2025-11-29T10:00:00+00:00"),
        order_row("o-returned", "returned", store_id="ST-002", store_name="Harbour Seafood Hub",
                  created_at="2025-11-29T11:00:00+00:00"),
        order_row("o-delivered", "delivered", created_at="", customer_name="Omar Haddad"),
    ]
    write_csv(str(tmp_path / "orders.csv"), rows, REQUIRED_COLUMNS)
    return tmp_path
