"""
Unit price resolution for catalog products.

Three layers, highest precedence first:
  1. user-edited     - prices typed in during the current estimating session
  2. persisted       - last known distributor / price-database price
  3. catalog default - list price in database.py

A refresh of the persisted layer (price database sync) never touches the
user-edited layer, so an in-progress manual edit survives a background
refresh. Reset drops the user edits and falls back to the persisted price.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from backend.database import RoofSystem

logger = logging.getLogger(__name__)


class PriceStoreError(Exception):
    """The persisted price store could not be read."""


def _parse_price(value) -> float | None:
    """Coerce a stored/entered price; None when it is not a usable price."""
    if isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


# ---------------------------------------------------------------------------
# Persisted price store (price lookup contract)
# ---------------------------------------------------------------------------

class JsonPriceStore:
    """
    Price database kept as a JSON file.

    Keys are "<system>-<product id>" (e.g. "gaf-tpo-membrane-60mil") so one
    file serves every system; get_price_map strips the system prefix.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise PriceStoreError(f"{self.path} does not hold a price object")
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    def get_price_map(self, system_id: str) -> dict:
        prefix = f"{system_id}-"
        return {
            key[len(prefix):]: value
            for key, value in self._read().items()
            if key.startswith(prefix)
        }

    def set_price(self, system_id: str, product_id: str, price: float) -> None:
        data = self._read()
        data[f"{system_id}-{product_id}"] = round(float(price), 2)
        self._write(data)
        logger.info(f"Persisted price {system_id}/{product_id} = ${price:,.2f}")

    def delete_price(self, system_id: str, product_id: str) -> bool:
        data = self._read()
        removed = data.pop(f"{system_id}-{product_id}", None) is not None
        if removed:
            self._write(data)
        return removed


def load_persisted_prices(store, system: RoofSystem) -> dict[str, float]:
    """
    Read the persisted layer for one system.

    An unreachable or corrupt store is not fatal: the estimate falls back to
    catalog defaults. Ids no longer in the catalog and unusable prices are
    dropped.
    """
    try:
        raw = store.get_price_map(system.id)
    except (OSError, ValueError, PriceStoreError) as exc:
        logger.warning(f"Price store unavailable for {system.id}, using catalog defaults: {exc}")
        return {}

    prices = {}
    for product_id, value in raw.items():
        if product_id not in system.products:
            logger.debug(f"Ignoring stored price for unknown product {system.id}/{product_id}")
            continue
        price = _parse_price(value)
        if price is None:
            logger.warning(f"Ignoring unusable stored price {value!r} for {system.id}/{product_id}")
            continue
        prices[product_id] = price
    return prices


# ---------------------------------------------------------------------------
# Session price state
# ---------------------------------------------------------------------------

@dataclass
class PriceOverrideState:
    """Per-session price layers. Never shared between sessions."""

    persisted: dict = field(default_factory=dict)
    user_edited: dict = field(default_factory=dict)

    def edit(self, product_id: str, price) -> None:
        value = _parse_price(price)
        if value is None:
            raise ValueError(f"Invalid price for {product_id}: {price!r}")
        self.user_edited[product_id] = value

    def refresh(self, price_map: dict) -> None:
        # Replaces the persisted layer only; user edits keep precedence.
        self.persisted = dict(price_map)

    def reset(self) -> None:
        self.user_edited.clear()

    def reset_product(self, product_id: str) -> None:
        self.user_edited.pop(product_id, None)

    def is_user_edited(self, product_id: str) -> bool:
        return product_id in self.user_edited

    def source(self, product_id: str) -> str:
        if product_id in self.user_edited:
            return "user"
        if product_id in self.persisted:
            return "persisted"
        return "default"


def resolve_price(product_id: str, state: PriceOverrideState, system: RoofSystem) -> float | None:
    """Effective unit price; None when the product is not in the catalog."""
    product = system.get_product(product_id)
    if product is None:
        return None
    if product_id in state.user_edited:
        return state.user_edited[product_id]
    if product_id in state.persisted:
        return state.persisted[product_id]
    return product.default_price


def effective_prices(state: PriceOverrideState, system: RoofSystem) -> dict[str, float]:
    return {pid: resolve_price(pid, state, system) for pid in system.products}
