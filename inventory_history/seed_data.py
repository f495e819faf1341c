#!/usr/bin/env python3
"""
seed_data.py

Generates a reproducible demo inventory history so charts have something to show
before the tracker has been polling for a while. Never called by the history store
itself; run it explicitly.

Writes:
- one snapshot per day into the configured history store (random-walk stock levels)
- the final day's inventory as a CSV export (default: sample_data/liveinventory.csv)

Run:
  python -m inventory_history.seed_data --days 30 --products 40 --seed 42
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import string
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, time, timezone
from typing import List, Optional

from inventory_history.config import get_config
from inventory_history.data.models import InventoryRecord, UpdateEvent
from inventory_history.data.backends.file_store import FileKeyValueStore
from inventory_history.history.change_detector import fingerprint
from inventory_history.history.snapshot_builder import build_snapshot
from inventory_history.history.store import HistoryStore

# -----------------------------
# Config & helper structures
# -----------------------------

CATEGORIES = {
    "Beverages": ["Sparkling Water", "Cold Brew", "Green Tea", "Lemonade"],
    "Snacks": ["Trail Mix", "Pretzels", "Granola Bar", "Rice Crackers"],
    "Household": ["Dish Soap", "Paper Towels", "Sponges", "Trash Bags"],
    "Personal Care": ["Shampoo", "Toothpaste", "Hand Soap", "Lip Balm"],
    "Produce": ["Apples", "Bananas", "Avocados"],
    "Frozen": ["Ice Cream", "Frozen Peas", "Dumplings"],
}

CSV_COLUMNS = ["SKU", "ProductName", "Catergory", "OnHand", "On Order", "ReorderThreshold"]


@dataclass
class Product:
    sku: str
    name: str
    category: Optional[str]
    on_hand: int
    on_order: int
    reorder_threshold: int

    def to_record(self) -> InventoryRecord:
        return InventoryRecord(
            id=self.sku,
            name=self.name,
            category=self.category,
            on_hand=self.on_hand,
            on_order=self.on_order,
            reorder_threshold=self.reorder_threshold,
        )


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def rand_sku(rng: random.Random) -> str:
    return "".join(rng.choices(string.ascii_uppercase + string.digits, k=8))


# -----------------------------
# Core generators
# -----------------------------

def gen_products(n: int, rng: random.Random) -> List[Product]:
    products = []
    names = [(cat, name) for cat, items in CATEGORIES.items() for name in items]
    for i in range(n):
        cat, base = names[i % len(names)]
        threshold = rng.randint(5, 25)
        products.append(Product(
            sku=rand_sku(rng),
            name=f"{base} #{i // len(names) + 1}",
            # A few rows come without a category, like the live export
            category=None if rng.random() < 0.05 else cat,
            on_hand=rng.randint(threshold, threshold * 6),
            on_order=0,
            reorder_threshold=threshold,
        ))
    return products

def step_day(products: List[Product], rng: random.Random) -> None:
    """Advance stock one day: sales draw down, open orders arrive, low items get reordered."""
    for p in products:
        if rng.random() < 0.15:
            # Unchanged day for this product
            continue
        sold = rng.randint(0, max(1, p.reorder_threshold // 2))
        p.on_hand = max(0, p.on_hand - sold)
        if p.on_order and rng.random() < 0.5:
            p.on_hand += p.on_order
            p.on_order = 0
        if p.on_hand <= p.reorder_threshold and p.on_order == 0:
            p.on_order = p.reorder_threshold * rng.randint(2, 4)

def gen_history(
    store: HistoryStore,
    products: List[Product],
    start: datetime,
    days: int,
    rng: random.Random,
) -> int:
    """Append one snapshot per day; returns how many were accepted."""
    accepted = 0
    for day in range(days):
        if day:
            step_day(products, rng)
        records = [p.to_record() for p in products]
        snapshot = build_snapshot(records, start + timedelta(days=day))
        if store.append_if_changed(snapshot, fingerprint(records)):
            store.record_event(UpdateEvent(
                observed_at=snapshot.taken_at,
                product_count=snapshot.product_count,
                total_stock=snapshot.total_on_hand,
            ))
            accepted += 1
    return accepted

def write_csv(path: str, products: List[Product]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(CSV_COLUMNS)
        for p in products:
            w.writerow([p.sku, p.name, p.category or "", p.on_hand, p.on_order, p.reorder_threshold])


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()
    ap = argparse.ArgumentParser(description="Seed a demo inventory history.")
    ap.add_argument("--days", type=int, default=config.default_seed_days, help="Days of history to generate")
    ap.add_argument("--products", type=int, default=config.default_seed_products, help="Number of products")
    ap.add_argument("--seed", type=int, default=config.default_seed_value, help="Random seed")
    ap.add_argument("--outdir", default=config.data_dir, help="Folder for the CSV export")
    ap.add_argument("--history-dir", default=config.history_dir, help="Folder for the persisted history")
    args = ap.parse_args(argv)

    if args.days < 1 or args.products < 1:
        print("--days and --products must be positive", file=sys.stderr)
        return 2

    rng = random.Random(args.seed)
    store = HistoryStore(FileKeyValueStore(args.history_dir))
    if store.snapshots():
        # Seeded days would predate the history already there
        print(f"Refusing to seed over existing history in {args.history_dir}", file=sys.stderr)
        return 2

    # Seed history ends today so "last N days" windows have data
    today = datetime.now(timezone.utc).date()
    start = datetime.combine(today - timedelta(days=args.days - 1), time(9, 0), tzinfo=timezone.utc)

    products = gen_products(args.products, rng)
    with store:
        accepted = gen_history(store, products, start, args.days, rng)

    ensure_dir(args.outdir)
    csv_path = os.path.join(args.outdir, config.inventory_file)
    write_csv(csv_path, products)

    # simple summary
    print(f"Seeded history in {args.history_dir}")
    print(f" products: {len(products)} | days: {args.days} | snapshots accepted: {accepted}")
    print(f" latest inventory export: {csv_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
