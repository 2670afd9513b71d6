"""Product catalog index: CSV loading, exact sku lookup and substring search."""

from __future__ import annotations

import math
from pathlib import Path
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger
import pandas as pd

from order_intake.errors import CatalogSourceError
from order_intake.models import CatalogEntry

MAX_SEARCH_RESULTS = 5

# Canonical field -> accepted header spellings (compared case-insensitively).
COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "sku": ("product_code", "sku", "code"),
    "description": ("product_name", "description", "name"),
    "price": ("price", "unit_price"),
    "stock": ("available_in_stock", "stock", "qty_available"),
    "min_order_qty": ("min_order_quantity", "min_order_qty", "minorderqty", "moq"),
}

CatalogSource = Union[str, Path]


def _norm(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def _resolve_columns(columns: Sequence[str]) -> Dict[str, str]:
    by_norm = {_norm(str(c)): str(c) for c in columns}
    resolved: Dict[str, str] = {}
    missing: List[str] = []
    for canonical, aliases in COLUMN_ALIASES.items():
        header = next((by_norm[a] for a in aliases if a in by_norm), None)
        if header is None:
            missing.append(canonical)
        else:
            resolved[canonical] = header
    if missing:
        raise CatalogSourceError(f"Catalog is missing required columns: {', '.join(missing)}")
    return resolved


def _to_non_negative_int(value: Any) -> int:
    number = float(value)
    if not math.isfinite(number) or number < 0 or not number.is_integer():
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return int(number)


def _to_price(value: Any) -> float:
    number = float(str(value).replace(",", "").replace("$", "").strip())
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"expected a non-negative price, got {value!r}")
    return number


def _row_to_entry(row: Dict[str, Any], columns: Dict[str, str]) -> CatalogEntry:
    sku = str(row.get(columns["sku"]) or "").strip()
    if not sku:
        raise ValueError("empty sku")
    description = str(row.get(columns["description"]) or "").strip()
    return CatalogEntry(
        sku=sku,
        description=description,
        price=_to_price(row.get(columns["price"])),
        stock=_to_non_negative_int(row.get(columns["stock"])),
        min_order_qty=_to_non_negative_int(row.get(columns["min_order_qty"])),
    )


def load_catalog_entries(source: CatalogSource) -> List[CatalogEntry]:
    """Parse a tabular product file into catalog entries.

    An unreadable file, or one without the required columns, fails the whole
    load. Individual malformed rows are skipped.
    """
    path = Path(source)
    try:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise CatalogSourceError(f"Cannot read catalog {path}: {exc}") from exc

    columns = _resolve_columns(list(frame.columns))
    entries: Dict[str, CatalogEntry] = {}
    skipped = 0
    for line_no, row in enumerate(frame.to_dict(orient="records"), start=2):
        try:
            entry = _row_to_entry(row, columns)
        except (TypeError, ValueError) as exc:
            skipped += 1
            logger.warning("Skipping catalog row {} in {}: {}", line_no, path.name, exc)
            continue
        entries[entry.sku] = entry

    logger.info("Loaded {} catalog entries from {} ({} skipped)", len(entries), path.name, skipped)
    return list(entries.values())


def _match_rank(entry: CatalogEntry, needle: str) -> Optional[int]:
    """0 for a description match, 1 for a sku-only match, None for no match."""
    description = _norm(entry.description)
    sku = _norm(entry.sku)
    if description and (needle in description or description in needle):
        return 0
    if sku and (needle in sku or sku in needle):
        return 1
    return None


class CatalogIndex:
    """In-memory product catalog, replaced wholesale on every refresh."""

    def __init__(
        self,
        entries: Sequence[CatalogEntry] = (),
        mirror: Optional[Callable[[Sequence[CatalogEntry]], None]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._entries: Tuple[CatalogEntry, ...] = ()
        self._by_sku: Dict[str, CatalogEntry] = {}
        self.mirror = mirror
        self._swap(entries)

    def _swap(self, entries: Sequence[CatalogEntry]) -> None:
        by_sku = {entry.sku: entry for entry in entries}
        with self._lock:
            self._entries = tuple(by_sku.values())
            self._by_sku = by_sku

    def refresh(self, source: CatalogSource) -> List[CatalogEntry]:
        entries = load_catalog_entries(source)
        self._swap(entries)
        if self.mirror is not None:
            self.mirror(entries)
        return entries

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def exact_lookup(self, sku: str) -> Optional[CatalogEntry]:
        return self._by_sku.get(sku)

    def fuzzy_search(self, text: str, limit: int = MAX_SEARCH_RESULTS) -> List[CatalogEntry]:
        needle = _norm(text)
        if not needle:
            return []
        ranked: List[Tuple[int, int, int, CatalogEntry]] = []
        for position, entry in enumerate(self._entries):
            rank = _match_rank(entry, needle)
            if rank is None:
                continue
            ranked.append((rank, len(entry.description), position, entry))
        ranked.sort(key=lambda item: item[:3])
        return [item[3] for item in ranked[:limit]]
