from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, List

import pandas as pd
from pydantic import ValidationError

from ..interface import InventorySource
from ..models import InventoryRecord

from inventory_history.config import get_config
from inventory_history.errors import InvalidInputError
from inventory_history.logging import get_logger

logger = get_logger(__name__)

# Header spellings seen in the spreadsheet exports, mapped to record fields.
# "Catergory" is how the live export spells it.
COLUMN_ALIASES: Dict[str, str] = {
    "SKU": "id",
    "sku": "id",
    "id": "id",
    "ProductName": "name",
    "product_name": "name",
    "name": "name",
    "Catergory": "category",
    "Category": "category",
    "category": "category",
    "OnHand": "on_hand",
    "on_hand": "on_hand",
    "On Order": "on_order",
    "OnOrder": "on_order",
    "on_order": "on_order",
    "ReorderThreshold": "reorder_threshold",
    "reorder_threshold": "reorder_threshold",
}

NUMERIC_FIELDS = ("on_hand", "on_order", "reorder_threshold")


class CsvInventorySource(InventorySource):
    """
    CSV-backed inventory source.
    - Re-reads the file on every fetch so each poll sees the latest export.
    - Unknown columns are ignored; missing numeric cells become None.
    """

    def __init__(self, path: str | Path = None) -> None:
        if path is None:
            config = get_config()
            path = Path(config.data_dir) / config.inventory_file
        self.path = Path(path)

    async def fetch(self) -> List[InventoryRecord]:
        return await asyncio.to_thread(self.read)

    def read(self) -> List[InventoryRecord]:
        if not self.path.exists():
            raise FileNotFoundError(f"Inventory file not found: {self.path}")

        # Read everything as text; numeric columns are coerced in records_from_frame
        df = pd.read_csv(self.path, dtype=str, skip_blank_lines=True)
        return records_from_frame(df)


def records_from_frame(df: pd.DataFrame) -> List[InventoryRecord]:
    """Convert a parsed inventory table into records."""
    rename = {col: COLUMN_ALIASES[col] for col in df.columns if col in COLUMN_ALIASES}
    df = df.rename(columns=rename)
    # An export carrying both "Catergory" and "Category" keeps the first one
    df = df.loc[:, ~df.columns.duplicated()]
    if "id" not in df.columns:
        raise InvalidInputError(f"Inventory table has no SKU/id column (columns: {list(df.columns)})")

    keep = [c for c in ("id", "name", "category", *NUMERIC_FIELDS) if c in df.columns]
    df = df[keep].copy()
    for col in NUMERIC_FIELDS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    df = df.astype(object).where(df.notna(), None)

    records: List[InventoryRecord] = []
    for row_number, row in enumerate(df.to_dict(orient="records"), start=2):
        for col in NUMERIC_FIELDS:
            if isinstance(row.get(col), float) and row[col].is_integer():
                row[col] = int(row[col])
        try:
            records.append(InventoryRecord.model_validate(row))
        except ValidationError as e:
            raise InvalidInputError(f"Unusable inventory row {row_number}: {e}") from e

    logger.debug(f"Parsed {len(records)} inventory records")
    return records
