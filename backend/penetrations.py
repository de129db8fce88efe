"""
Penetrations & additions - roof penetration flashing kits and sheet metal.

Two add-ons priced outside the main assembly takeoff:
  - penetrations: counted items (pipes, curbs, drains ...), each with a small
    bill of materials and an install time per unit
  - sheet metal flashing: profiles measured in linear feet, priced from the
    selected metal, gauge and the profile's developed width

Both roll up into one material cost and one labor-minutes figure that the
breakdown adds alongside the main estimate.

Usage:
    additions = estimate_additions({"pipe-1-3": 4, "curb-small": 1}, SheetMetalState())
    print(additions.total_material_cost, format_labor_time(additions.total_labor_minutes))
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Penetration types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PenetrationMaterial:
    name: str
    unit: str
    qty_per_unit: float
    unit_price: float


@dataclass(frozen=True)
class PenetrationType:
    id: str
    name: str
    category: str
    description: str
    labor_minutes: int
    materials: tuple
    size_label: str = ""


def _mat(name, unit, qty, price) -> PenetrationMaterial:
    return PenetrationMaterial(name, unit, qty, price)


# Shared kit components
_PIPE_BOOT = ('TPO Pipe Boot (1"-6")', "Each", 28.00)
_FLASH_12 = ('TPO Non-Reinforced Flashing (12" x 12")', "Piece", 8.50)
_FLASH_18 = ('TPO Non-Reinforced Flashing (18" x 18")', "Piece", 14.00)
_FLASH_24 = ('TPO Non-Reinforced Flashing (24" x 24")', "Piece", 18.00)
_FLASH_ROLL = ("TPO Non-Reinforced Flashing (Roll)", "Lin Ft", 4.50)
_PRIMER = ("TPO Primer", "Quart", 32.00)
_CAULK = ("Sealant Caulk", "Tube", 12.00)
_FILLER = ("Pitch Pan Filler / Pourable Sealer", "Quart", 28.00)
_INSIDE_CORNER = ("TPO Pre-Molded Inside Corner", "Each", 14.00)
_OUTSIDE_CORNER = ("TPO Pre-Molded Outside Corner", "Each", 14.00)
_TERMBAR = ("Termination Bar", "Piece (10')", 15.00)
_COVER_TAPE = ('TPO Cover Tape (6")', "Lin Ft", 3.80)
_NAILER = ("Wood Nailer / Blocking", "Lin Ft", 3.50)
_CURB_WRAP = ("Polyiso Insulation (Curb Wrap)", "Board", 52.00)
_PAN_4 = ('Galvanized Pitch Pan (4" Round)', "Each", 22.00)
_PAN_RECT = ('Galvanized Pitch Pan (6"x12" Rect)', "Each", 42.00)


def _kit(*parts) -> tuple:
    """(component, qty per unit) pairs -> materials."""
    return tuple(_mat(name, unit, qty, price) for (name, unit, price), qty in parts)


def _clamp(price: float) -> tuple:
    return ("Stainless Steel Clamp", "Each", price)


def _curb_kit(flash_lf, termbars, primer, caulk, tape, nailer, wraps=0) -> list:
    parts = [(_FLASH_ROLL, flash_lf), (_INSIDE_CORNER, 4), (_OUTSIDE_CORNER, 4)]
    if termbars:
        parts.append((_TERMBAR, termbars))
    parts += [(_PRIMER, primer), (_CAULK, caulk), (_COVER_TAPE, tape), (_NAILER, nailer)]
    if wraps:
        parts.append((_CURB_WRAP, wraps))
    return parts


_PENETRATION_ROWS = [
    # --- Pipe Flashings ---
    PenetrationType(
        "pipe-1-3", 'Pipe Flashing (1"-3")', "Pipe Flashings",
        "Small pipe penetration for plumbing vents and conduits", 30,
        _kit((_PIPE_BOOT, 1), (_FLASH_12, 1), (_PRIMER, 0.25), (_CAULK, 0.5), (_clamp(4.50), 1)),
        '1"-3" diameter',
    ),
    PenetrationType(
        "pipe-4-6", 'Pipe Flashing (4"-6")', "Pipe Flashings",
        "Medium pipe penetration for larger vents and exhaust pipes", 45,
        _kit((_PIPE_BOOT, 1), (_FLASH_18, 1), (_PRIMER, 0.5), (_CAULK, 1), (_clamp(6.50), 1)),
        '4"-6" diameter',
    ),
    PenetrationType(
        "pipe-8-12", 'Pipe Flashing (8"-12")', "Pipe Flashings",
        "Large pipe penetration for HVAC ducts and large exhaust", 60,
        _kit((('TPO Split Pipe Flashing (8"-12")', "Each", 85.00), 1), (_FLASH_24, 2),
             (_PRIMER, 0.75), (_CAULK, 1.5), (_clamp(9.00), 1), (_COVER_TAPE, 4)),
        '8"-12" diameter',
    ),
    # --- Pitch Pans ---
    PenetrationType(
        "pitch-pan-round-small", 'Round Pitch Pan (4")', "Pitch Pans",
        "Small round pitch pan for a single conduit or pipe", 45,
        _kit((_PAN_4, 1), (_FILLER, 0.5), (_FLASH_18, 1), (_PRIMER, 0.25), (_CAULK, 0.5)),
        '4" round',
    ),
    PenetrationType(
        "pitch-pan-round-large", 'Round Pitch Pan (8")', "Pitch Pans",
        "Large round pitch pan for larger penetrations", 60,
        _kit((('Galvanized Pitch Pan (8" Round)', "Each", 35.00), 1), (_FILLER, 1),
             (_FLASH_24, 1), (_PRIMER, 0.5), (_CAULK, 1)),
        '8" round',
    ),
    PenetrationType(
        "pitch-pan-rect", 'Rectangular Pitch Pan (6"x12")', "Pitch Pans",
        "Rectangular pitch pan for multi-conduit or irregular penetrations", 75,
        _kit((_PAN_RECT, 1), (_FILLER, 1.5), (_FLASH_24, 2), (_PRIMER, 0.5), (_CAULK, 1),
             (_INSIDE_CORNER, 4)),
        '6"x12"',
    ),
    # --- Roof Curbs ---
    PenetrationType(
        "curb-small", 'Small Roof Curb (up to 24"x24")', "Roof Curbs",
        "Small equipment curb for exhaust fans and small RTUs", 120,
        _kit((("Galvanized Roof Curb (Small)", "Each", 185.00), 1),
             *_curb_kit(12, 1, 0.5, 2, 10, 8)),
        'Up to 24"x24"',
    ),
    PenetrationType(
        "curb-medium", 'Medium Roof Curb (24"x48" to 36"x48")', "Roof Curbs",
        "Medium equipment curb for RTUs up to 5 ton", 180,
        _kit((("Galvanized Roof Curb (Medium)", "Each", 350.00), 1),
             *_curb_kit(20, 2, 1, 3, 16, 14, wraps=1)),
        '24"x48" to 36"x48"',
    ),
    PenetrationType(
        "curb-large", 'Large Roof Curb (48"x96" and up)', "Roof Curbs",
        "Large equipment curb for RTUs 7.5 ton and up", 240,
        _kit((("Galvanized Roof Curb (Large)", "Each", 650.00), 1),
             *_curb_kit(32, 3, 1.5, 4, 28, 24, wraps=2)),
        '48"x96"+',
    ),
    # --- Exhaust Fans ---
    PenetrationType(
        "exhaust-fan-small", 'Exhaust Fan (up to 18")', "Exhaust Fans",
        "Small restroom or utility exhaust fan", 90,
        _kit((("Galvanized Fan Curb (Small)", "Each", 145.00), 1),
             *_curb_kit(8, 0, 0.5, 1, 8, 6)),
        'Up to 18"',
    ),
    PenetrationType(
        "exhaust-fan-medium", 'Exhaust Fan (18"-30")', "Exhaust Fans",
        "Kitchen or commercial exhaust fan", 120,
        _kit((("Galvanized Fan Curb (Medium)", "Each", 265.00), 1),
             *_curb_kit(14, 1, 0.75, 2, 12, 10)),
        '18"-30"',
    ),
    PenetrationType(
        "exhaust-fan-large", 'Exhaust Fan (30"+)', "Exhaust Fans",
        "Large upblast or industrial exhaust fan", 180,
        _kit((("Galvanized Fan Curb (Large)", "Each", 420.00), 1),
             *_curb_kit(20, 2, 1, 3, 18, 16, wraps=1)),
        '30"+',
    ),
    # --- Drains & Scuppers ---
    PenetrationType(
        "roof-drain", "Roof Drain", "Drains & Scuppers",
        "Interior roof drain with TPO flashing collar", 60,
        _kit((("TPO Drain Flashing / Retrofit Drain", "Each", 95.00), 1), (_FLASH_24, 1),
             (_PRIMER, 0.5), (_CAULK, 1), (("Drain Clamping Ring", "Each", 35.00), 1),
             (("Leaf Guard / Strainer", "Each", 18.00), 1)),
    ),
    PenetrationType(
        "scupper", "Scupper (Through-Wall Drain)", "Drains & Scuppers",
        "Through-wall scupper drain with conductor head", 90,
        _kit((("Galvanized Scupper Box", "Each", 125.00), 1), (_FLASH_ROLL, 6),
             (_INSIDE_CORNER, 2), (_PRIMER, 0.5), (_CAULK, 2),
             (("Conductor Head / Collector Box", "Each", 85.00), 1)),
    ),
    # --- Skylights ---
    PenetrationType(
        "skylight-small", "Skylight Curb (up to 2'x4')", "Skylights",
        "Small tubular or flat skylight on curb", 150,
        _kit(*_curb_kit(16, 2, 0.75, 2, 14, 12)),
        "Up to 2'x4'",
    ),
    PenetrationType(
        "skylight-large", "Skylight Curb (4'x8' and up)", "Skylights",
        "Large commercial skylight on curb", 240,
        _kit(*_curb_kit(28, 3, 1.5, 3, 26, 24, wraps=1)),
        "4'x8'+",
    ),
    # --- Miscellaneous ---
    PenetrationType(
        "conduit-cluster", "Conduit / Cable Penetration", "Miscellaneous",
        "Electrical conduit or cable tray penetration", 30,
        _kit((_PAN_4, 1), (_FILLER, 0.5), (_FLASH_12, 1), (_PRIMER, 0.25), (_CAULK, 0.5)),
    ),
    PenetrationType(
        "gas-line", "Gas Line Penetration", "Miscellaneous",
        "Gas supply line roof penetration", 45,
        _kit((_PIPE_BOOT, 1), (_FLASH_18, 1), (_PRIMER, 0.25), (_CAULK, 1), (_clamp(6.50), 1)),
    ),
    PenetrationType(
        "antenna-support", "Antenna / Equipment Support", "Miscellaneous",
        "Antenna mast, satellite dish or equipment support stand", 60,
        _kit((_PAN_RECT, 1), (_FILLER, 1), (_FLASH_24, 1), (_PRIMER, 0.5), (_CAULK, 1)),
    ),
    PenetrationType(
        "plumbing-vent-stack", "Plumbing Vent Stack", "Miscellaneous",
        "Standard plumbing vent stack penetration", 30,
        _kit((_PIPE_BOOT, 1), (_FLASH_12, 1), (_PRIMER, 0.25), (_CAULK, 0.5), (_clamp(4.50), 1)),
    ),
]

PENETRATION_CATEGORIES = (
    "Pipe Flashings",
    "Pitch Pans",
    "Roof Curbs",
    "Exhaust Fans",
    "Drains & Scuppers",
    "Skylights",
    "Miscellaneous",
)


def _build_penetrations(rows: list) -> dict[str, PenetrationType]:
    types = {}
    for pen in rows:
        if pen.id in types:
            raise ValueError(f"Duplicate penetration id: {pen.id}")
        if pen.category not in PENETRATION_CATEGORIES:
            raise ValueError(f"Penetration {pen.id} has unknown category {pen.category!r}")
        types[pen.id] = pen
    return types


PENETRATION_TYPES = _build_penetrations(_PENETRATION_ROWS)


def penetrations_by_category() -> dict[str, list]:
    grouped = {category: [] for category in PENETRATION_CATEGORIES}
    for pen in PENETRATION_TYPES.values():
        grouped[pen.category].append(pen)
    return grouped


@dataclass(frozen=True)
class PenetrationMaterialCost:
    penetration_id: str
    penetration_name: str
    material: str
    unit: str
    quantity: int
    unit_price: float
    total_cost: float

    @property
    def row_id(self) -> str:
        return f"pen-{self.penetration_id}-{self.material}"


@dataclass(frozen=True)
class PenetrationEstimate:
    counts: dict
    materials: tuple = ()
    total_material_cost: float = 0.0
    total_labor_minutes: int = 0


def estimate_penetrations(counts: dict) -> PenetrationEstimate:
    """
    Bill of materials for the counted penetrations.

    Quantities are rounded up per material within each penetration type,
    so a quarter quart of primer on four pipes orders one quart for that
    type. Unknown ids and non-positive counts are skipped.
    """
    materials = []
    labor_minutes = 0
    used = {}

    for pen_id, count in counts.items():
        pen = PENETRATION_TYPES.get(pen_id)
        if pen is None:
            logger.warning(f"Skipping unknown penetration type {pen_id}")
            continue
        if isinstance(count, bool) or not isinstance(count, (int, float)) or count <= 0:
            continue
        used[pen_id] = count
        labor_minutes += pen.labor_minutes * count
        for mat in pen.materials:
            quantity = math.ceil(mat.qty_per_unit * count)
            materials.append(PenetrationMaterialCost(
                penetration_id=pen.id,
                penetration_name=pen.name,
                material=mat.name,
                unit=mat.unit,
                quantity=quantity,
                unit_price=mat.unit_price,
                total_cost=round(quantity * mat.unit_price, 2),
            ))

    return PenetrationEstimate(
        counts=used,
        materials=tuple(materials),
        total_material_cost=round(sum(m.total_cost for m in materials), 2),
        total_labor_minutes=round(labor_minutes),
    )


# ---------------------------------------------------------------------------
# Sheet metal flashing
# ---------------------------------------------------------------------------

STANDARD_DEVELOPED_WIDTH_IN = 8  # base price per LF assumes an 8" girth


@dataclass(frozen=True)
class MetalGauge:
    id: str
    label: str
    price_multiplier: float


@dataclass(frozen=True)
class MetalType:
    id: str
    name: str
    base_price_per_lf: float
    default_gauge_id: str
    gauges: tuple

    def get_gauge(self, gauge_id: str) -> MetalGauge | None:
        for gauge in self.gauges:
            if gauge.id == gauge_id:
                return gauge
        return None


@dataclass(frozen=True)
class FlashingProfile:
    id: str
    name: str
    description: str
    developed_width_in: float
    labor_minutes_per_lf: float


def _steel_gauges(suffix: str = "") -> tuple:
    multipliers = ((28, 0.70), (26, 0.80), (24, 1.00), (22, 1.25), (20, 1.55), (18, 2.00), (16, 2.60))
    return tuple(MetalGauge(f"{ga}ga{suffix}", f"{ga} Gauge", mult) for ga, mult in multipliers)


METAL_TYPES = {
    metal.id: metal for metal in (
        MetalType("galvanized-steel", "Galvanized Steel", 3.50, "24ga", _steel_gauges()),
        MetalType("prefinished-steel", "Prefinished Steel", 4.25, "24ga-pf", _steel_gauges("-pf")),
        MetalType("aluminum", "Aluminum", 4.25, "040", (
            MetalGauge("032", '.032"', 0.85),
            MetalGauge("040", '.040"', 1.00),
            MetalGauge("050", '.050"', 1.30),
            MetalGauge("063", '.063"', 1.65),
        )),
        MetalType("stainless-steel", "Stainless Steel", 8.50, "24ga-ss", (
            MetalGauge("26ga-ss", "26 Gauge", 0.85),
            MetalGauge("24ga-ss", "24 Gauge", 1.00),
            MetalGauge("22ga-ss", "22 Gauge", 1.30),
            MetalGauge("20ga-ss", "20 Gauge", 1.65),
        )),
        MetalType("copper", "Copper", 14.00, "20oz", (
            MetalGauge("16oz", "16 oz", 0.80),
            MetalGauge("20oz", "20 oz", 1.00),
            MetalGauge("24oz", "24 oz", 1.25),
        )),
        MetalType("galvalume", "Galvalume", 4.00, "24ga-gv", (
            MetalGauge("26ga-gv", "26 Gauge", 0.85),
            MetalGauge("24ga-gv", "24 Gauge", 1.00),
            MetalGauge("22ga-gv", "22 Gauge", 1.30),
        )),
    )
}

FLASHING_PROFILES = {
    profile.id: profile for profile in (
        FlashingProfile("drip-edge", "Drip Edge",
                        "Roof edge drip flashing that directs water away from the fascia", 4, 0.5),
        FlashingProfile("gravel-stop", "Gravel Stop",
                        "Edge flashing with gravel guard to retain ballast", 6, 0.6),
        FlashingProfile("coping-cap", "Coping Cap",
                        "Cap covering the top of parapet walls", 12, 0.8),
        FlashingProfile("counter-flashing", "Counter Flashing (Receiver)",
                        "Wall-to-roof transition covering the top edge of base flashing", 6, 0.6),
        FlashingProfile("edge-metal", "Edge Metal / Fascia",
                        "Finished metal fascia along the roof perimeter", 8, 0.7),
        FlashingProfile("reglet-flashing", "Reglet Flashing",
                        "Masonry wall flashing set into a reglet cut", 4, 0.8),
        FlashingProfile("through-wall", "Through-Wall Flashing",
                        "Embedded flashing diverting moisture within masonry walls", 10, 1.0),
        FlashingProfile("parapet-cap", "Parapet Cap",
                        "Full parapet capping wrapping down both sides", 16, 1.0),
        FlashingProfile("valley-flashing", "Valley Flashing",
                        "Lining for roof valley intersections", 20, 0.8),
        FlashingProfile("step-flashing", "Step Flashing",
                        "Stepped wall-to-slope pieces at each course", 8, 1.2),
        FlashingProfile("custom-flashing", "Custom Flashing",
                        "Custom-fabricated profile measured in linear feet", 8, 0.8),
    )
}

for _metal in METAL_TYPES.values():
    if _metal.get_gauge(_metal.default_gauge_id) is None:
        raise ValueError(f"{_metal.id}: default gauge {_metal.default_gauge_id} not offered")


@dataclass
class SheetMetalState:
    metal_type_id: str = "galvanized-steel"
    gauge_id: str = "24ga"
    lengths: dict = field(default_factory=dict)  # profile id -> linear feet

    def set_metal_type(self, metal_type_id: str) -> None:
        """Switching metal resets the gauge to that metal's default."""
        metal = METAL_TYPES.get(metal_type_id)
        if metal is None:
            raise ValueError(f"Unknown metal type: {metal_type_id}")
        self.metal_type_id = metal.id
        self.gauge_id = metal.default_gauge_id

    def set_gauge(self, gauge_id: str) -> None:
        metal = METAL_TYPES.get(self.metal_type_id)
        if metal is None or metal.get_gauge(gauge_id) is None:
            raise ValueError(f"Gauge {gauge_id} not offered for {self.metal_type_id}")
        self.gauge_id = gauge_id

    def set_length(self, profile_id: str, length_lf: float) -> None:
        if profile_id not in FLASHING_PROFILES:
            raise ValueError(f"Unknown flashing profile: {profile_id}")
        if length_lf <= 0:
            self.lengths.pop(profile_id, None)
        else:
            self.lengths[profile_id] = float(length_lf)

    def to_dict(self) -> dict:
        return {
            "metal_type_id": self.metal_type_id,
            "gauge_id": self.gauge_id,
            "lengths": dict(self.lengths),
        }


def get_flashing_price_per_lf(metal_type_id: str, gauge_id: str, profile: FlashingProfile) -> float:
    """Price per LF, scaled by the profile's developed width. Unknown metal/gauge -> 0."""
    metal = METAL_TYPES.get(metal_type_id)
    if metal is None:
        return 0.0
    gauge = metal.get_gauge(gauge_id)
    if gauge is None:
        return 0.0
    width_factor = profile.developed_width_in / STANDARD_DEVELOPED_WIDTH_IN
    return round(metal.base_price_per_lf * gauge.price_multiplier * width_factor, 2)


@dataclass(frozen=True)
class SheetMetalLine:
    profile_id: str
    name: str
    length_lf: float
    unit_price: float
    total_cost: float

    @property
    def row_id(self) -> str:
        return f"sm-{self.profile_id}"


@dataclass(frozen=True)
class SheetMetalEstimate:
    items: tuple = ()
    total_material_cost: float = 0.0
    total_labor_minutes: int = 0
    metal_type: str = ""
    gauge: str = ""


def estimate_sheet_metal(state: SheetMetalState) -> SheetMetalEstimate:
    metal = METAL_TYPES.get(state.metal_type_id)
    gauge = metal.get_gauge(state.gauge_id) if metal else None

    items = []
    labor_minutes = 0
    for profile_id, length in state.lengths.items():
        if length <= 0:
            continue
        profile = FLASHING_PROFILES.get(profile_id)
        if profile is None:
            logger.warning(f"Skipping unknown flashing profile {profile_id}")
            continue
        unit_price = get_flashing_price_per_lf(state.metal_type_id, state.gauge_id, profile)
        items.append(SheetMetalLine(
            profile_id=profile.id,
            name=profile.name,
            length_lf=length,
            unit_price=unit_price,
            total_cost=round(unit_price * length, 2),
        ))
        labor_minutes += round(profile.labor_minutes_per_lf * length)

    items.sort(key=lambda item: item.total_cost, reverse=True)

    return SheetMetalEstimate(
        items=tuple(items),
        total_material_cost=round(sum(item.total_cost for item in items), 2),
        total_labor_minutes=labor_minutes,
        metal_type=metal.name if metal else "",
        gauge=gauge.label if gauge else "",
    )


# ---------------------------------------------------------------------------
# Combined additions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AdditionsEstimate:
    penetrations: PenetrationEstimate
    sheet_metal: SheetMetalEstimate
    total_material_cost: float
    total_labor_minutes: int

    @property
    def labor_time(self) -> str:
        return format_labor_time(self.total_labor_minutes)

    def to_dict(self) -> dict:
        return {
            "penetrations": {
                "counts": dict(self.penetrations.counts),
                "materials": [
                    {
                        "id": m.row_id,
                        "penetration": m.penetration_name,
                        "material": m.material,
                        "unit": m.unit,
                        "quantity": m.quantity,
                        "unit_price": m.unit_price,
                        "total_cost": m.total_cost,
                    }
                    for m in self.penetrations.materials
                ],
                "total_material_cost": self.penetrations.total_material_cost,
                "total_labor_minutes": self.penetrations.total_labor_minutes,
            },
            "sheet_metal": {
                "metal_type": self.sheet_metal.metal_type,
                "gauge": self.sheet_metal.gauge,
                "items": [
                    {
                        "id": item.row_id,
                        "name": item.name,
                        "length_lf": item.length_lf,
                        "unit_price": item.unit_price,
                        "total_cost": item.total_cost,
                    }
                    for item in self.sheet_metal.items
                ],
                "total_material_cost": self.sheet_metal.total_material_cost,
                "total_labor_minutes": self.sheet_metal.total_labor_minutes,
            },
            "total_material_cost": self.total_material_cost,
            "total_labor_minutes": self.total_labor_minutes,
            "labor_time": self.labor_time,
        }


def estimate_additions(counts: dict | None, sheet_metal: SheetMetalState | None = None) -> AdditionsEstimate:
    penetrations = estimate_penetrations(counts or {})
    metal = estimate_sheet_metal(sheet_metal or SheetMetalState())
    return AdditionsEstimate(
        penetrations=penetrations,
        sheet_metal=metal,
        total_material_cost=round(penetrations.total_material_cost + metal.total_material_cost, 2),
        total_labor_minutes=penetrations.total_labor_minutes + metal.total_labor_minutes,
    )


def format_labor_time(minutes: float) -> str:
    """Minutes -> "45 min", "2 hr", "1 hr 30 min"."""
    minutes = round(minutes)
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins} min"
    if mins == 0:
        return f"{hours} hr"
    return f"{hours} hr {mins} min"
