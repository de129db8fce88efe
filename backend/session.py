"""
One estimating session: the selections, prices and edits for a single
estimate, and the explicit recompute that turns them into a breakdown.

compute() always runs the whole chain in order:
    insulation -> fasteners -> takeoff -> pricing -> compile
    -> additions -> labor/equipment -> breakdown (+ saved edits)

Sessions never share mutable state; only the catalog (read-only) and the
persisted price map they were seeded from are common.

Usage:
    session = EstimatorSession("carlisle-tpo", persisted_prices)
    session.measurements = RoofMeasurements(roof_area_sqft=10_000)
    result = session.compute()
    print(result.breakdown.grand_total)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from backend.assembly import default_assembly
from backend.breakdown import (
    EstimateBreakdown,
    apply_overlay,
    breakdown_overlay,
    build_breakdown,
)
from backend.config import settings
from backend.database import get_system
from backend.labor_equipment import (
    LaborEquipmentTotals,
    calculate_labor_equipment_totals,
    default_labor_equipment,
)
from backend.penetrations import AdditionsEstimate, SheetMetalState, estimate_additions
from backend.pricing import PriceOverrideState
from backend.roof_estimator import Estimate, RoofMeasurements, run_estimate, validate_measurements

logger = logging.getLogger(__name__)


@dataclass
class EstimateResult:
    estimate: Estimate
    additions: AdditionsEstimate
    labor: LaborEquipmentTotals
    breakdown: EstimateBreakdown
    warnings: list = field(default_factory=list)
    dropped_edits: list = field(default_factory=list)

    def to_dict(self) -> dict:
        est = self.estimate.to_dict()
        return {
            "system_id": est["system_id"],
            "system_name": est["system_name"],
            "warnings": list(self.warnings),
            "insulation": est["insulation"],
            "fasteners": est["fasteners"],
            "line_items": est["line_items"],
            "categories": est["categories"],
            "total_material_cost": est["total_material_cost"],
            "additions": self.additions.to_dict(),
            "labor_equipment": {
                "labor_total": self.labor.labor_total,
                "equipment_total": self.labor.equipment_total,
                "labor": list(self.labor.labor_breakdown),
                "equipment": list(self.labor.equipment_breakdown),
            },
            "breakdown": self.breakdown.to_dict(),
            "grand_total": self.breakdown.grand_total,
        }


class EstimatorSession:
    """Selections and edits for one estimate. Nothing is recomputed until compute()."""

    def __init__(
        self,
        system_id: str,
        persisted_prices: dict | None = None,
        tax_percent: float | None = None,
        profit_percent: float | None = None,
    ):
        self.system = get_system(system_id)
        self.name = ""
        self.assembly = default_assembly(self.system) if self.system.kind == "single-ply" else None
        self.measurements = RoofMeasurements()
        self.prices = PriceOverrideState(persisted=dict(persisted_prices or {}))
        self.labor_equipment = default_labor_equipment(self.system)
        self.penetrations: dict[str, int] = {}
        self.sheet_metal = SheetMetalState()
        self.breakdown_edits: dict = {}
        self.tax_percent = settings.DEFAULT_TAX_PERCENT if tax_percent is None else tax_percent
        self.profit_percent = settings.DEFAULT_PROFIT_PERCENT if profit_percent is None else profit_percent

    @property
    def system_id(self) -> str:
        return self.system.id

    def set_penetration_count(self, penetration_id: str, count: int) -> None:
        if count <= 0:
            self.penetrations.pop(penetration_id, None)
        else:
            self.penetrations[penetration_id] = int(count)

    def refresh_prices(self, price_map: dict) -> None:
        self.prices.refresh(price_map)

    def compute(self) -> EstimateResult:
        estimate = run_estimate(self.system, self.assembly, self.measurements, self.prices)
        additions = estimate_additions(self.penetrations, self.sheet_metal)
        labor = calculate_labor_equipment_totals(
            self.labor_equipment,
            self.measurements.roof_area_sqft,
            self.measurements.total_flashing_lf,
        )
        breakdown = build_breakdown(
            estimate, additions, self.labor_equipment,
            tax_percent=self.tax_percent,
            profit_percent=self.profit_percent,
        )
        dropped = apply_overlay(breakdown, self.breakdown_edits) if self.breakdown_edits else []

        logger.info(
            f"{self.system.id}: {len(estimate.line_items)} line items, "
            f"materials ${estimate.total_material_cost:,.2f}, grand total ${breakdown.grand_total:,.2f}"
        )
        return EstimateResult(
            estimate=estimate,
            additions=additions,
            labor=labor,
            breakdown=breakdown,
            warnings=validate_measurements(self.measurements, self.system),
            dropped_edits=dropped,
        )

    def capture_breakdown(self, breakdown: EstimateBreakdown) -> None:
        """Keep the edits made on a computed breakdown so the next compute() re-applies them."""
        self.breakdown_edits = breakdown_overlay(breakdown)
