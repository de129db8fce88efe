"""
Estimate breakdown - the editable, sectioned view of a full project estimate.

Four sections (materials, penetrations, labor, equipment), each a list of
toggle-able rows plus its own tax and profit modifiers:

    base          = sum of enabled row totals
    tax / profit  = base x percent / 100 when switched on, else 0
    section total = base + tax + profit
    grand total   = sum of section totals

A section's tax and profit only ever apply to its own base.

Usage:
    breakdown = build_breakdown(estimate, additions, labor_state)
    breakdown.section("materials").set_enabled("membrane-60mil", False)
    print(breakdown.grand_total)
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field

from backend.config import settings

logger = logging.getLogger(__name__)

SECTION_KEYS = ("materials", "penetrations", "labor", "equipment")

SECTION_TITLES = {
    "materials": "Materials",
    "penetrations": "Penetrations & Additions",
    "labor": "Labor",
    "equipment": "Equipment",
}


def _check_amount(label: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {label}: {value!r}")
    number = float(value)
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"Invalid {label}: {value!r}")
    return number


# ---------------------------------------------------------------------------
# Rows and sections
# ---------------------------------------------------------------------------

@dataclass
class BreakdownRow:
    id: str
    name: str
    description: str = ""
    category: str = ""
    unit: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    enabled: bool = True
    custom: bool = False
    quantity_edited: bool = False
    price_edited: bool = False

    @property
    def total(self) -> float:
        return round(self.quantity * self.unit_price, 2)

    @property
    def contribution(self) -> float:
        # disabled rows keep their quantity/price, they just don't count
        return self.total if self.enabled else 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "unit": self.unit,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total": self.total,
            "enabled": self.enabled,
            "custom": self.custom,
        }


@dataclass
class TaxProfit:
    tax_enabled: bool = False
    tax_percent: float = field(default_factory=lambda: settings.DEFAULT_TAX_PERCENT)
    profit_enabled: bool = False
    profit_percent: float = field(default_factory=lambda: settings.DEFAULT_PROFIT_PERCENT)

    def tax_amount(self, base: float) -> float:
        return round(base * self.tax_percent / 100, 2) if self.tax_enabled else 0.0

    def profit_amount(self, base: float) -> float:
        return round(base * self.profit_percent / 100, 2) if self.profit_enabled else 0.0


@dataclass
class BreakdownSection:
    key: str
    rows: list = field(default_factory=list)
    tax_profit: TaxProfit = field(default_factory=TaxProfit)

    @property
    def title(self) -> str:
        return SECTION_TITLES[self.key]

    def get_row(self, row_id: str) -> BreakdownRow:
        for row in self.rows:
            if row.id == row_id:
                return row
        raise KeyError(f"{self.key}: no row {row_id}")

    # --- row edits (totals are properties, so every edit is live) ---

    def set_quantity(self, row_id: str, quantity) -> None:
        row = self.get_row(row_id)
        row.quantity = _check_amount("quantity", quantity)
        row.quantity_edited = True

    def set_unit_price(self, row_id: str, unit_price) -> None:
        row = self.get_row(row_id)
        row.unit_price = _check_amount("unit price", unit_price)
        row.price_edited = True

    def set_enabled(self, row_id: str, enabled: bool) -> None:
        self.get_row(row_id).enabled = bool(enabled)

    def add_row(self, row: BreakdownRow) -> None:
        if any(existing.id == row.id for existing in self.rows):
            raise ValueError(f"{self.key}: duplicate row id {row.id}")
        row.quantity = _check_amount("quantity", row.quantity)
        row.unit_price = _check_amount("unit price", row.unit_price)
        row.custom = True
        self.rows.append(row)

    def remove_row(self, row_id: str) -> None:
        self.rows.remove(self.get_row(row_id))

    # --- modifiers ---

    def set_tax(self, enabled: bool, percent=None) -> None:
        self.tax_profit.tax_enabled = bool(enabled)
        if percent is not None:
            self.tax_profit.tax_percent = _check_amount("tax percent", percent)

    def set_profit(self, enabled: bool, percent=None) -> None:
        self.tax_profit.profit_enabled = bool(enabled)
        if percent is not None:
            self.tax_profit.profit_percent = _check_amount("profit percent", percent)

    # --- section math ---

    @property
    def base(self) -> float:
        return round(sum(row.contribution for row in self.rows), 2)

    @property
    def tax_amount(self) -> float:
        return self.tax_profit.tax_amount(self.base)

    @property
    def profit_amount(self) -> float:
        return self.tax_profit.profit_amount(self.base)

    @property
    def total(self) -> float:
        return round(self.base + self.tax_amount + self.profit_amount, 2)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "rows": [row.to_dict() for row in self.rows],
            "tax_profit": asdict(self.tax_profit),
            "base": self.base,
            "tax": self.tax_amount,
            "profit": self.profit_amount,
            "total": self.total,
        }


@dataclass
class EstimateBreakdown:
    system_id: str
    roof_area_sqft: float
    sections: dict

    def section(self, key: str) -> BreakdownSection:
        if key not in self.sections:
            raise KeyError(f"Unknown breakdown section: {key}")
        return self.sections[key]

    @property
    def grand_total(self) -> float:
        return round(sum(self.sections[key].total for key in SECTION_KEYS), 2)

    @property
    def cost_per_sqft(self) -> float:
        if self.roof_area_sqft <= 0:
            return 0.0
        return round(self.grand_total / self.roof_area_sqft, 2)

    def summary(self) -> dict:
        return {
            "sections": {
                key: {
                    "base": s.base,
                    "tax": s.tax_amount,
                    "profit": s.profit_amount,
                    "total": s.total,
                }
                for key, s in self.sections.items()
            },
            "grand_total": self.grand_total,
            "cost_per_sqft": self.cost_per_sqft,
        }

    def to_dict(self) -> dict:
        return {
            "system_id": self.system_id,
            "roof_area_sqft": self.roof_area_sqft,
            "sections": [self.sections[key].to_dict() for key in SECTION_KEYS],
            "grand_total": self.grand_total,
            "cost_per_sqft": self.cost_per_sqft,
        }


# ---------------------------------------------------------------------------
# Build from the compiled estimate
# ---------------------------------------------------------------------------

def _material_rows(estimate) -> list[BreakdownRow]:
    return [
        BreakdownRow(
            id=item.row_id,
            name=item.product.name,
            description=item.note or item.product.description,
            category=item.category.value,
            unit=item.product.unit,
            quantity=item.units_to_order,
            unit_price=item.unit_price,
            enabled=item.units_to_order > 0,
        )
        for item in estimate.line_items
    ]


def _penetration_rows(additions) -> list[BreakdownRow]:
    rows = []
    if additions is None:
        return rows
    counts = additions.penetrations.counts
    for mat in additions.penetrations.materials:
        count = counts.get(mat.penetration_id, 0)
        rows.append(BreakdownRow(
            id=mat.row_id,
            name=mat.material,
            description=f"For {count:g} x {mat.penetration_name}",
            category="Penetrations",
            unit=mat.unit,
            quantity=mat.quantity,
            unit_price=mat.unit_price,
        ))
    metal = additions.sheet_metal
    for item in metal.items:
        rows.append(BreakdownRow(
            id=item.row_id,
            name=item.name,
            description=f"{metal.metal_type} {metal.gauge}".strip(),
            category="Sheet Metal Flashing",
            unit="LF",
            quantity=item.length_lf,
            unit_price=item.unit_price,
        ))
    return rows


def _rate_rows(items, category: str, area_sqft: float, flashing_lf: float) -> list[BreakdownRow]:
    # quantity is the driving measurement so total == quantity x rate
    return [
        BreakdownRow(
            id=item.id,
            name=item.label,
            description=item.description,
            category=category,
            unit=item.unit,
            quantity=item.driving_quantity(area_sqft, flashing_lf),
            unit_price=item.rate,
            enabled=item.enabled,
        )
        for item in items
    ]


def build_breakdown(
    estimate,
    additions=None,
    labor_state=None,
    tax_percent: float | None = None,
    profit_percent: float | None = None,
) -> EstimateBreakdown:
    """Lay the compiled estimate, additions and labor/equipment out as sections."""
    if tax_percent is None:
        tax_percent = settings.DEFAULT_TAX_PERCENT
    if profit_percent is None:
        profit_percent = settings.DEFAULT_PROFIT_PERCENT
    m = estimate.measurements
    area = m.roof_area_sqft
    flashing_lf = m.total_flashing_lf

    rows = {
        "materials": _material_rows(estimate),
        "penetrations": _penetration_rows(additions),
        "labor": _rate_rows(labor_state.labor_items, "Labor", area, flashing_lf) if labor_state else [],
        "equipment": _rate_rows(labor_state.equipment_items, "Equipment", area, flashing_lf) if labor_state else [],
    }
    sections = {
        key: BreakdownSection(
            key=key,
            rows=rows[key],
            tax_profit=TaxProfit(tax_percent=tax_percent, profit_percent=profit_percent),
        )
        for key in SECTION_KEYS
    }
    return EstimateBreakdown(system_id=estimate.system_id, roof_area_sqft=area, sections=sections)


# ---------------------------------------------------------------------------
# Saved edits
# ---------------------------------------------------------------------------

def breakdown_overlay(breakdown: EstimateBreakdown) -> dict:
    """The user's edits to a breakdown, keyed by section and row id."""
    overlay = {}
    for key in SECTION_KEYS:
        section = breakdown.sections[key]
        overlay[key] = {
            "tax_profit": asdict(section.tax_profit),
            "rows": {
                row.id: {
                    "enabled": row.enabled,
                    "quantity": row.quantity if row.quantity_edited else None,
                    "unit_price": row.unit_price if row.price_edited else None,
                }
                for row in section.rows
                if not row.custom
            },
            "custom_rows": [
                {
                    "id": row.id,
                    "name": row.name,
                    "description": row.description,
                    "unit": row.unit,
                    "quantity": row.quantity,
                    "unit_price": row.unit_price,
                    "enabled": row.enabled,
                }
                for row in section.rows
                if row.custom
            ],
        }
    return overlay


def apply_overlay(breakdown: EstimateBreakdown, overlay: dict) -> list[str]:
    """
    Re-apply saved edits to a freshly built breakdown.

    Rows are matched by id. Edits for rows the rebuild no longer produces
    (stale saved data) are dropped and returned.
    """
    dropped = []
    for key, edits in overlay.items():
        section = breakdown.section(key)
        tp = edits.get("tax_profit")
        if tp:
            section.set_tax(tp["tax_enabled"], tp["tax_percent"])
            section.set_profit(tp["profit_enabled"], tp["profit_percent"])
        for row_id, edit in edits.get("rows", {}).items():
            try:
                section.get_row(row_id)
            except KeyError:
                dropped.append(row_id)
                continue
            if edit.get("quantity") is not None:
                section.set_quantity(row_id, edit["quantity"])
            if edit.get("unit_price") is not None:
                section.set_unit_price(row_id, edit["unit_price"])
            section.set_enabled(row_id, edit.get("enabled", True))
        for custom in edits.get("custom_rows", []):
            section.add_row(BreakdownRow(category=section.title, **custom))
    if dropped:
        logger.warning(f"Dropped {len(dropped)} stale breakdown edits: {', '.join(dropped)}")
    return dropped
