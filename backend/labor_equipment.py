"""
Labor & equipment rate items for a roofing project estimate.

Each item is a rate times a driving quantity. Area and linear-foot items are
driven by the roof measurements; hourly, daily and flat items carry their own
quantity.

Rate types:
    per_sqft  rate x roof area
    per_lf    rate x flashing LF (base flashing + walls)
    per_hour  rate x hours
    per_day   rate x days
    flat      rate x quantity (normally 1)
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

RATE_TYPES = ("per_sqft", "per_lf", "per_hour", "per_day", "flat")

RATE_UNITS = {
    "per_sqft": "sq ft",
    "per_lf": "LF",
    "per_hour": "hr",
    "per_day": "day",
    "flat": "ea",
}


@dataclass
class RateItem:
    id: str
    label: str
    description: str
    rate_type: str
    rate: float
    quantity: float = 1
    enabled: bool = True

    def __post_init__(self):
        if self.rate_type not in RATE_TYPES:
            raise ValueError(f"{self.id}: unknown rate type {self.rate_type!r}")
        for name in ("rate", "quantity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not math.isfinite(value) or value < 0:
                raise ValueError(f"{self.id}: invalid {name} {value!r}")

    @property
    def unit(self) -> str:
        return RATE_UNITS[self.rate_type]

    def driving_quantity(self, area_sqft: float, flashing_lf: float) -> float:
        if self.rate_type == "per_sqft":
            return area_sqft
        if self.rate_type == "per_lf":
            return flashing_lf
        return self.quantity

    def cost(self, area_sqft: float, flashing_lf: float) -> float:
        return self.rate * self.driving_quantity(area_sqft, flashing_lf)

    def detail(self, area_sqft: float, flashing_lf: float) -> str:
        if self.rate_type == "per_sqft":
            return f"{area_sqft:,.0f} sq ft x ${self.rate:.2f}/sq ft"
        if self.rate_type == "per_lf":
            return f"{flashing_lf:,.0f} LF x ${self.rate:.2f}/LF"
        if self.rate_type == "per_hour":
            return f"{self.quantity:g} hrs x ${self.rate:.2f}/hr"
        if self.rate_type == "per_day":
            plural = "" if self.quantity == 1 else "s"
            return f"{self.quantity:g} day{plural} x ${self.rate:.2f}/day"
        return "Flat rate"


@dataclass
class LaborEquipmentState:
    labor_items: list = field(default_factory=list)
    equipment_items: list = field(default_factory=list)

    def __post_init__(self):
        ids = [item.id for item in self.labor_items + self.equipment_items]
        duplicates = {i for i in ids if ids.count(i) > 1}
        if duplicates:
            raise ValueError(f"Duplicate labor/equipment ids: {sorted(duplicates)}")

    def get_item(self, item_id: str) -> RateItem:
        for item in self.labor_items + self.equipment_items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def set_rate(self, item_id: str, rate: float) -> None:
        if rate < 0:
            raise ValueError(f"Rate must be non-negative: {rate}")
        self.get_item(item_id).rate = float(rate)

    def set_quantity(self, item_id: str, quantity: float) -> None:
        if quantity < 0:
            raise ValueError(f"Quantity must be non-negative: {quantity}")
        self.get_item(item_id).quantity = float(quantity)

    def set_enabled(self, item_id: str, enabled: bool) -> None:
        self.get_item(item_id).enabled = bool(enabled)

    def to_dict(self) -> dict:
        return {
            "labor_items": [asdict(item) for item in self.labor_items],
            "equipment_items": [asdict(item) for item in self.equipment_items],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LaborEquipmentState":
        return cls(
            labor_items=[RateItem(**item) for item in data.get("labor_items", [])],
            equipment_items=[RateItem(**item) for item in data.get("equipment_items", [])],
        )


# ---------------------------------------------------------------------------
# Default rate sets
# ---------------------------------------------------------------------------

def _tpo_defaults() -> LaborEquipmentState:
    return LaborEquipmentState(
        labor_items=[
            RateItem("tpo-labor-membrane", "Membrane Installation Crew",
                     "TPO membrane installation, welding and seaming crew", "per_sqft", 1.25),
            RateItem("tpo-labor-insulation", "Insulation Installation",
                     "Insulation board and cover board installation", "per_sqft", 0.45),
            RateItem("tpo-labor-foreman", "Foreman / Supervisor",
                     "On-site supervision and quality control", "per_hour", 75, 24),
            RateItem("tpo-labor-tearoff", "Tear-Off / Deck Prep",
                     "Removal of existing roofing and deck preparation", "per_sqft", 0.65,
                     enabled=False),
            RateItem("tpo-labor-flashing", "Flashing & Detail Work",
                     "Base flashing, wall terminations and detail work", "per_lf", 12),
            RateItem("tpo-labor-cleanup", "Cleanup & Disposal",
                     "Job site cleanup and debris disposal", "flat", 1500, enabled=False),
        ],
        equipment_items=[
            RateItem("tpo-equip-welder", "Hot-Air Welder",
                     "Automatic hot-air welder for field seams", "per_day", 200, 3),
            RateItem("tpo-equip-hand-welder", "Hand Welder / Detail Gun",
                     "Hand-held welder for flashings and details", "per_day", 75, 3),
            RateItem("tpo-equip-screw-gun", "Fastening Equipment",
                     "Screw guns and fastening tools", "per_day", 100, 3),
            RateItem("tpo-equip-crane", "Crane / Material Hoist",
                     "Rooftop loading of materials", "per_day", 800, 2, enabled=False),
            RateItem("tpo-equip-lift", "Boom Lift / Scaffolding",
                     "Roof access equipment", "per_day", 400, 3, enabled=False),
            RateItem("tpo-equip-safety", "Safety Equipment",
                     "Fall protection, guardrails and warning lines", "flat", 750),
            RateItem("tpo-equip-misc", "Misc. Tools & Supplies",
                     "Rollers, knives, brushes and consumables", "flat", 400),
        ],
    )


def _coating_defaults() -> LaborEquipmentState:
    return LaborEquipmentState(
        labor_items=[
            RateItem("labor-crew", "Crew Labor",
                     "Coating application crew", "per_sqft", 0.75),
            RateItem("labor-foreman", "Foreman / Supervisor",
                     "On-site supervision", "per_hour", 65, 16),
            RateItem("labor-prep", "Surface Prep Labor",
                     "Washing and surface preparation", "per_sqft", 0.15),
            RateItem("labor-seam", "Seam Treatment Labor",
                     "Mastic and fabric over seams and fasteners", "per_hour", 55, 8, enabled=False),
        ],
        equipment_items=[
            RateItem("equip-sprayer", "Airless Sprayer",
                     "Airless spray rig for base and finish coats", "per_day", 250, 3),
            RateItem("equip-washer", "Pressure Washer",
                     "Surface cleaning before priming", "per_day", 150, 1),
            RateItem("equip-lift", "Boom Lift / Scaffolding",
                     "Roof access equipment", "per_day", 350, 3, enabled=False),
            RateItem("equip-safety", "Safety Equipment",
                     "Fall protection and safety gear", "flat", 500),
            RateItem("equip-misc", "Misc. Tools & Supplies",
                     "Rollers, brushes and consumables", "flat", 300),
        ],
    )


def default_labor_equipment(system) -> LaborEquipmentState:
    """Fresh default rate set for the system (a new copy every call)."""
    if system.kind == "coating":
        return _coating_defaults()
    return _tpo_defaults()


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LaborEquipmentTotals:
    labor_total: float
    equipment_total: float
    labor_breakdown: tuple
    equipment_breakdown: tuple

    @property
    def total(self) -> float:
        return round(self.labor_total + self.equipment_total, 2)


def _breakdown(items, area_sqft, flashing_lf) -> tuple:
    return tuple(
        {
            "id": item.id,
            "label": item.label,
            "cost": round(item.cost(area_sqft, flashing_lf), 2),
            "detail": item.detail(area_sqft, flashing_lf),
        }
        for item in items
        if item.enabled
    )


def calculate_labor_equipment_totals(
    state: LaborEquipmentState,
    area_sqft: float,
    flashing_lf: float = 0.0,
) -> LaborEquipmentTotals:
    labor = _breakdown(state.labor_items, area_sqft, flashing_lf)
    equipment = _breakdown(state.equipment_items, area_sqft, flashing_lf)
    return LaborEquipmentTotals(
        labor_total=round(sum(row["cost"] for row in labor), 2),
        equipment_total=round(sum(row["cost"] for row in equipment), 2),
        labor_breakdown=labor,
        equipment_breakdown=equipment,
    )
