#!/usr/bin/env python3
"""
seed_data.py

Generates fake perishables orders to a CSV under a local folder (default: sample_data)
for the CSV-backed order backend.

Every status is represented, weighted toward the early lifecycle so the
pending-decision and timeline screens have something to show.

Run:
  python -m opsconsole.backend.seed_data --orders 60 --days 7
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import string
import sys
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from opsconsole.config import get_config
from opsconsole.data.backends.csv_backend import REQUIRED_COLUMNS
from opsconsole.data.models import OrderStatus

# -----------------------------
# Config & helper structures
# -----------------------------

STORES = [
    ("ST-001", "Marina Fresh Catch"),
    ("ST-002", "Harbour Seafood Hub"),
    ("ST-003", "Downtown Cold Store"),
]

CUSTOMERS = [
    "Rajesh Kumar", "Aisha Rahman", "Omar Haddad", "Priya Nair", "Lena Fischer",
    "Samir Khoury", "Maria Santos", "Chen Wei", "Fatima Al Zahra", "John Miller",
]

DELIVERY_TYPES = ["express", "next-day"]
PAYMENT_METHODS = ["card", "cod", "upi", "wallet"]

STATUS_WEIGHTS: Dict[str, float] = {
    OrderStatus.PENDING.value: 0.22,
    OrderStatus.ACCEPTED.value: 0.12,
    OrderStatus.READY_TO_PICKUP.value: 0.08,
    OrderStatus.ACCEPTED_BY_DELIVERY_PARTNER.value: 0.06,
    OrderStatus.PICKED_UP.value: 0.06,
    OrderStatus.OUT_FOR_DELIVERY.value: 0.08,
    OrderStatus.DELIVERED.value: 0.20,
    OrderStatus.CANCELLED.value: 0.05,
    OrderStatus.RETURNED.value: 0.06,
    OrderStatus.REFUNDED.value: 0.03,
    OrderStatus.REJECTED.value: 0.04,
}


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def rand_object_id(rnd: random.Random) -> str:
    return "".join(rnd.choices("0123456789abcdef", k=24))

def rand_invoice(rnd: random.Random, ts: datetime) -> str:
    return f"INV-{ts:%y%m%d}-" + "".join(rnd.choices(string.digits, k=5))

def payment_status_for(status: str, method: str, rnd: random.Random) -> str:
    if status == OrderStatus.REFUNDED.value:
        return "refunded"
    if method == "cod":
        return "completed" if status == OrderStatus.DELIVERED.value else "pending"
    return "failed" if rnd.random() < 0.05 else "paid"


# -----------------------------
# Core generator
# -----------------------------

def gen_orders(n: int, start_dt: datetime, end_dt: datetime, seed: int) -> List[Dict]:
    rnd = random.Random(seed)
    statuses = list(STATUS_WEIGHTS.keys())
    weights = list(STATUS_WEIGHTS.values())
    window = max(60, int((end_dt - start_dt).total_seconds()))

    orders = []
    for _ in range(n):
        created = start_dt + timedelta(seconds=rnd.randint(0, window))
        status = rnd.choices(statuses, weights=weights)[0]
        # pending orders have not been touched since placement
        updated = created if status == OrderStatus.PENDING.value else created + timedelta(minutes=rnd.randint(5, 600))
        store_id, store_name = rnd.choice(STORES)
        method = rnd.choice(PAYMENT_METHODS)
        orders.append({
            "order_id": rand_object_id(rnd),
            "invoice_number": rand_invoice(rnd, created),
            "store_id": store_id,
            "store_name": store_name,
            "customer_name": rnd.choice(CUSTOMERS),
            "status": status,
            "delivery_type": rnd.choices(DELIVERY_TYPES, weights=[0.6, 0.4])[0],
            "payment_method": method,
            "payment_status": payment_status_for(status, method, rnd),
            "grand_total": f"{rnd.uniform(40.0, 900.0):.2f}",
            "created_at": created.isoformat(timespec="seconds"),
            "updated_at": updated.isoformat(timespec="seconds"),
        })
    return orders


# -----------------------------
# CSV writer
# -----------------------------

def write_csv(path: str, rows: List[Dict], headers: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers)
        w.writeheader()
        for r in rows:
            w.writerow(r)


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate fake perishables orders to a CSV.")
    parser.add_argument("--orders", type=int, default=config.default_seed_orders, help="Number of orders.")
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Days of order history.")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if the CSV already exists.")
    args = parser.parse_args(argv)

    outdir = args.output_dir
    ensure_dir(outdir)
    path = os.path.join(outdir, "orders.csv")
    if args.no_overwrite and os.path.exists(path):
        print(f"Refusing to overwrite existing file: {path}", file=sys.stderr)
        return 2

    end_dt = datetime.now(timezone.utc).replace(microsecond=0)
    start_dt = end_dt - timedelta(days=max(1, args.days))

    orders = gen_orders(args.orders, start_dt, end_dt, args.seed)
    write_csv(path, orders, REQUIRED_COLUMNS)

    counts: Dict[str, int] = {}
    for o in orders:
        counts[o["status"]] = counts.get(o["status"], 0) + 1
    print(f"Generated {len(orders)} orders in {path}")
    print(" " + " | ".join(f"{k}: {v}" for k, v in sorted(counts.items())))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
