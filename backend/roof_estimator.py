"""
Roof Estimator - assembly-driven quantity takeoff and material cost estimate.

Takes the roof assembly selections and field measurements, works out how much
of every implied catalog product to order (always rounding up to whole
purchase units), then prices the order list through the session's price
layers.

Pipeline:
    insulation summary -> fastener resolution -> takeoff -> pricing -> compile

Usage:
    python -m backend.roof_estimator
    python -m backend.roof_estimator --system gaf-tpo --json output.json
"""

import json
import logging
import math
import sys
from dataclasses import dataclass, fields

from backend.assembly import NO_SELECTION, AssemblyConfig, default_assembly
from backend.config import settings
from backend.database import (
    INSULATION_PLATE_TYPES,
    MEMBRANE_PLATE_TYPES,
    ROOF_SYSTEMS,
    Category,
    Product,
    RoofSystem,
    get_system,
    insulation_product_id,
    membrane_screw_product_id,
    screw_product_id,
)
from backend.fasteners import (
    INSULATION_FASTENERS_PER_BOARD,
    MEMBRANE_FASTENERS_PER_LF,
    ZONE_RATIOS,
    FastenerResolution,
    resolve_fasteners,
)
from backend.insulation import InsulationSummary, summarize_insulation
from backend.pricing import PriceOverrideState, resolve_price

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Takeoff constants
# ---------------------------------------------------------------------------

MEMBRANE_WASTE = 1.05        # ~6" side laps
BOARD_WASTE = 1.03           # cuts on boards and sheet goods
BASE_FLASHING_HEIGHT_IN = 18
BOARD_AREA_SQFT = 32         # 4' x 8'
MEMBRANE_ROLL_WIDTH_FT = 10  # seam row spacing for mechanically attached sheets
MIN_CORNERS = 8
WALL_LF_PER_CORNER = 50


# ---------------------------------------------------------------------------
# Project Measurements
# ---------------------------------------------------------------------------

def _coerce_measure(value) -> float:
    """Field input -> non-negative float. Anything unusable reads as zero."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


@dataclass
class RoofMeasurements:
    """Measurements for one roof. Negative, NaN or unparseable values read as zero."""

    roof_area_sqft: float = 0.0
    wall_lf: float = 0.0
    wall_height_ft: float = 0.0
    base_flashing_lf: float = 0.0

    # --- coated metal roofs ---
    horizontal_seam_lf: float = 0.0
    vertical_seam_lf: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            setattr(self, f.name, _coerce_measure(getattr(self, f.name)))

    @classmethod
    def from_raw(cls, data: dict | None) -> "RoofMeasurements":
        data = data or {}
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})

    @property
    def base_flashing_sqft(self) -> float:
        return self.base_flashing_lf * (BASE_FLASHING_HEIGHT_IN / 12)

    @property
    def wall_sqft(self) -> float:
        return self.wall_lf * self.wall_height_ft

    @property
    def total_flashing_lf(self) -> float:
        return self.base_flashing_lf + self.wall_lf

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_strings(self) -> dict[str, str]:
        return {f.name: repr(getattr(self, f.name)) for f in fields(self)}


def validate_measurements(m: RoofMeasurements, system: RoofSystem) -> list[str]:
    """
    Validate measurements and return a list of warning messages.
    Does not block the estimate, just flags suspicious values.
    """
    warnings = []

    if m.roof_area_sqft <= 0:
        warnings.append("Total roof area is zero; no materials will be listed.")

    if system.kind == "single-ply":
        if m.wall_lf > 0 and m.wall_height_ft <= 0:
            warnings.append("Wall length entered without a wall height; wall flashing skipped.")
        if m.roof_area_sqft > 0:
            # A square roof has P = 4 * sqrt(A); flashing far beyond that is suspicious
            max_perimeter = 4 * math.sqrt(m.roof_area_sqft)
            if m.base_flashing_lf > max_perimeter * 3:
                warnings.append(
                    f"Base flashing ({m.base_flashing_lf:,.0f} LF) seems long for "
                    f"the area ({m.roof_area_sqft:,.0f} sqft)."
                )
        if m.wall_height_ft > 20:
            warnings.append(f"Wall height ({m.wall_height_ft:g} ft) is unusually high.")
    elif m.roof_area_sqft > 0 and m.horizontal_seam_lf == 0 and m.vertical_seam_lf == 0:
        warnings.append("No seam footage entered; seam sealing materials skipped.")

    return warnings


# ---------------------------------------------------------------------------
# Quantity takeoff
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TakeoffEntry:
    product_id: str
    raw_quantity: float
    note: str = ""
    zone: str | None = None
    pieces: int | None = None

    @property
    def units_to_order(self) -> int:
        return math.ceil(self.raw_quantity)


@dataclass(frozen=True)
class _Takeoff:
    system: RoofSystem
    assembly: AssemblyConfig | None
    m: RoofMeasurements
    summary: InsulationSummary
    resolution: FastenerResolution | None

    def entry(self, product_id: str, driving: float, note: str, **extra) -> TakeoffEntry | None:
        product = self.system.get_product(product_id)
        if product is None:
            logger.warning(f"{self.system.id}: takeoff references unknown product {product_id}")
            return None
        return TakeoffEntry(product_id, driving / product.coverage, note, **extra)


def _take_vapor_barrier(t: _Takeoff, category: Category) -> list:
    if t.assembly.vapor_barrier == NO_SELECTION:
        return []
    product_id = t.system.vapor_barriers.get(t.assembly.vapor_barrier)
    if product_id is None:
        return []
    area = t.m.roof_area_sqft
    return [t.entry(product_id, area * BOARD_WASTE, f"Covers {area:,.0f} sq ft roof area")]


def _take_insulation(t: _Takeoff, category: Category) -> list:
    entries = []
    area = t.m.roof_area_sqft
    layers = t.summary.active_layers
    for number, layer in enumerate(layers, start=1):
        prefix = f"Layer {number}: " if len(layers) > 1 else ""
        boards = area * BOARD_WASTE / BOARD_AREA_SQFT
        entries.append(t.entry(
            insulation_product_id(layer.thickness), area * BOARD_WASTE,
            f"{prefix}{boards:,.0f} boards for {area:,.0f} sq ft",
        ))
    return entries


def _take_cover_board(t: _Takeoff, category: Category) -> list:
    option = t.system.cover_boards.get(t.assembly.cover_board)
    if option is None:
        return []
    product_id, _thickness = option
    area = t.m.roof_area_sqft
    boards = area * BOARD_WASTE / BOARD_AREA_SQFT
    return [t.entry(product_id, area * BOARD_WASTE, f"{boards:,.0f} boards for {area:,.0f} sq ft")]


def _take_membrane(t: _Takeoff, category: Category) -> list:
    product_id = f"membrane-{t.assembly.membrane_thickness}"
    return [t.entry(product_id, t.m.roof_area_sqft * MEMBRANE_WASTE,
                    "Includes 5% for side-lap overlap waste")]


def _take_adhesive(t: _Takeoff, category: Category) -> list:
    entries = []
    area = t.m.roof_area_sqft
    if not t.assembly.is_mechanically_attached:
        if t.summary.total_thickness > 0:
            layers = t.summary.layer_count
            entries.append(t.entry(
                "adhesive-insulation", area * BOARD_WASTE * layers,
                f"Adhering {layers} insulation layer{'s' if layers > 1 else ''} over {area:,.0f} sq ft",
            ))
        entries.append(t.entry("adhesive-bonding", area * MEMBRANE_WASTE,
                               f"Adhering membrane over {area:,.0f} sq ft"))
    if t.m.base_flashing_lf > 0:
        flash_sqft = t.m.base_flashing_sqft
        entries.append(t.entry("adhesive-primer", flash_sqft,
                               f"Primer for {flash_sqft:,.0f} sq ft of base flashing area"))
    return entries


def _zone_note(counts: dict) -> str:
    return " / ".join(f"{zone.title()}: {count:,}" for zone, count in counts.items())


def insulation_zone_fasteners(area: float) -> dict[str, int]:
    """Screws per zone for one pass of boards, at that zone's per-board density."""
    return {
        zone: math.ceil(area * ratio / BOARD_AREA_SQFT * INSULATION_FASTENERS_PER_BOARD[zone])
        for zone, ratio in ZONE_RATIOS.items()
    }


def insulation_fastener_count(area: float) -> int:
    return sum(insulation_zone_fasteners(area).values())


def membrane_seam_rows(area: float) -> tuple[int, float]:
    """(seam rows, total seam LF) for a square roof of the given area."""
    width = math.sqrt(area)
    rows = math.ceil(width / MEMBRANE_ROLL_WIDTH_FT)
    return rows, rows * (area / width)


def membrane_fastener_count(area: float) -> int:
    _rows, seam_lf = membrane_seam_rows(area)
    return sum(
        math.ceil(seam_lf * ratio * MEMBRANE_FASTENERS_PER_LF[zone])
        for zone, ratio in ZONE_RATIOS.items()
    )


def boxes_by_zone(pieces: dict, per_box: float) -> dict[str, int]:
    """
    Whole boxes for each zone row of one fastener order.

    The zones are boxed in sequence, so the rows add up to the boxes needed
    for the combined count. A zone that fits in the previous zone's last box
    gets 0.
    """
    boxes = {}
    running = 0
    ordered = 0
    for zone, count in pieces.items():
        running += count
        needed = math.ceil(running / per_box)
        boxes[zone] = needed - ordered
        ordered = needed
    return boxes


def _take_fasteners(t: _Takeoff, category: Category) -> list:
    if not t.assembly.is_mechanically_attached:
        return []
    entries = []
    area = t.m.roof_area_sqft
    resolution = t.resolution

    if t.summary.total_thickness > 0:
        zones = insulation_zone_fasteners(area)
        total = sum(zones.values())
        length = resolution.insulation_screw_length
        entries.append(t.entry(
            screw_product_id(length), total,
            f'{total:,} screws ({length:g}") for {t.summary.total_thickness:.1f}" insulation '
            f"({_zone_note(zones)})",
        ))
        plate_id = INSULATION_PLATE_TYPES.get(t.assembly.plate_type)
        if plate_id:
            entries.append(t.entry(plate_id, total,
                                   f"{total:,} insulation stress plates (1:1 with screws)"))
        # one heavy-duty plate per screw driven in the perimeter and corner zones
        perimeter_corner = zones["perimeter"] + zones["corner"]
        if perimeter_corner > 0:
            entries.append(t.entry(
                "fastener-plates-perimeter", perimeter_corner,
                f"{perimeter_corner:,} heavy-duty plates for perimeter & corner zones",
            ))

    rows, _seam_lf = membrane_seam_rows(area)
    total = membrane_fastener_count(area)
    screw_id = membrane_screw_product_id(resolution.membrane_screw_length)
    screw = t.system.get_product(screw_id)
    per_box = screw.coverage if screw else 1
    pieces = resolution.zone_quantities(total)
    boxes = boxes_by_zone(pieces, per_box)
    for zone, count in pieces.items():
        if count <= 0:
            continue
        note = f"{count:,} membrane screws, {zone} zone ({rows} seam rows)"
        if boxes[zone] == 0:
            note += ", boxed with the zones above"
        entries.append(t.entry(screw_id, boxes[zone] * per_box, note, zone=zone, pieces=count))
    plate_id = MEMBRANE_PLATE_TYPES.get(t.assembly.membrane_plate_type)
    if plate_id:
        entries.append(t.entry(plate_id, total,
                               f"{total:,} seam plates (1:1 with membrane screws)"))
    return entries


def _take_flashing(t: _Takeoff, category: Category) -> list:
    entries = []
    m = t.m
    if m.base_flashing_lf > 0:
        entries.append(t.entry("flash-membrane-24", m.base_flashing_lf,
                               f'{m.base_flashing_lf:,.0f} lin ft at {BASE_FLASHING_HEIGHT_IN}" height'))
    if m.wall_lf > 0 and m.wall_height_ft > 0:
        entries.append(t.entry("flash-membrane-12", m.wall_lf,
                               f"{m.wall_lf:,.0f} lin ft wall termination"))
    return entries


def _take_accessories(t: _Takeoff, category: Category) -> list:
    entries = []
    m = t.m
    if m.wall_lf > 0:
        entries.append(t.entry("acc-termbar", m.wall_lf, "Securing membrane at wall termination"))
        entries.append(t.entry("acc-caulk", m.wall_lf,
                               f"Sealing termination bar at {m.wall_lf:,.0f} lin ft"))
    if m.total_flashing_lf > 0:
        entries.append(t.entry("acc-coverstrip", m.total_flashing_lf,
                               f"Detail work for {m.total_flashing_lf:,.0f} lin ft of flashing"))
    if m.wall_lf > 0:
        corners = max(MIN_CORNERS, math.ceil(m.wall_lf / WALL_LF_PER_CORNER))
        entries.append(t.entry("acc-corners", corners, f"Estimated {corners} inside/outside corners"))
    return entries


def _take_coating(t: _Takeoff, category: Category) -> list:
    driving = {
        "area": t.m.roof_area_sqft,
        "horizontal_seam": t.m.horizontal_seam_lf,
        "vertical_seam": t.m.vertical_seam_lf,
    }
    units = {"area": "sq ft", "horizontal_seam": "LF horizontal seam", "vertical_seam": "LF vertical seam"}
    entries = []
    for product in t.system.products.values():
        if product.category != category:
            continue
        amount = driving.get(product.measure, 0.0)
        entries.append(t.entry(product.id, amount, f"{amount:,.0f} {units[product.measure]}"))
    return entries


_CATEGORY_TAKEOFF = {
    Category.VAPOR_BARRIER: _take_vapor_barrier,
    Category.INSULATION: _take_insulation,
    Category.COVER_BOARD: _take_cover_board,
    Category.MEMBRANE: _take_membrane,
    Category.ADHESIVE: _take_adhesive,
    Category.FASTENERS: _take_fasteners,
    Category.FLASHING: _take_flashing,
    Category.ACCESSORIES: _take_accessories,
    Category.PREPARATION: _take_coating,
    Category.PRIMER: _take_coating,
    Category.HORIZONTAL_SEAM: _take_coating,
    Category.VERTICAL_SEAM: _take_coating,
    Category.BASE_COAT: _take_coating,
    Category.FINISH_COAT: _take_coating,
}

_missing = [c.value for c in Category if c not in _CATEGORY_TAKEOFF]
if _missing:
    raise ValueError(f"No takeoff rule for categories: {_missing}")


def calculate_takeoff(
    system: RoofSystem,
    assembly: AssemblyConfig | None,
    m: RoofMeasurements,
    summary: InsulationSummary,
    resolution: FastenerResolution | None,
) -> list[TakeoffEntry]:
    """
    Raw quantities for every product implied by the current selections.

    Products the selections do not call for are left out entirely. The one
    zero-quantity row kept is a fastener zone row whose screws ride in an
    earlier zone's box. No roof area means no order list at all.
    """
    if m.roof_area_sqft <= 0:
        return []
    if system.kind == "single-ply" and assembly is None:
        raise ValueError(f"{system.id} takeoff needs an assembly configuration")

    t = _Takeoff(system, assembly, m, summary, resolution)
    entries = []
    for category in system.categories:
        for entry in _CATEGORY_TAKEOFF[category](t, category):
            if entry is not None and (entry.raw_quantity > 0 or entry.pieces):
                entries.append(entry)
    return entries


# ---------------------------------------------------------------------------
# Estimate compiler
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LineItem:
    product: Product
    raw_quantity: float
    units_to_order: int
    unit_price: float
    total_cost: float
    note: str = ""
    zone: str | None = None
    pieces: int | None = None

    @property
    def row_id(self) -> str:
        return f"{self.product.id}:{self.zone}" if self.zone else self.product.id

    @property
    def category(self) -> Category:
        return self.product.category

    def to_dict(self) -> dict:
        item = {
            "id": self.row_id,
            "product_id": self.product.id,
            "name": self.product.name,
            "category": self.product.category.value,
            "unit": self.product.unit,
            "raw_quantity": round(self.raw_quantity, 4),
            "units_to_order": self.units_to_order,
            "unit_price": round(self.unit_price, 2),
            "total_cost": self.total_cost,
            "note": self.note,
        }
        if self.zone:
            item["zone"] = self.zone
            item["pieces"] = self.pieces
        return item


@dataclass(frozen=True)
class Estimate:
    system_id: str
    measurements: RoofMeasurements
    line_items: tuple = ()
    total_material_cost: float = 0.0
    insulation: InsulationSummary | None = None
    fasteners: FastenerResolution | None = None

    def by_category(self) -> dict:
        grouped = {}
        for item in self.line_items:
            grouped.setdefault(item.category, []).append(item)
        return grouped

    def to_dict(self) -> dict:
        system = get_system(self.system_id)
        return {
            "system_id": self.system_id,
            "system_name": system.name,
            "measurements": self.measurements.to_dict(),
            "base_flashing_sqft": round(self.measurements.base_flashing_sqft, 2),
            "wall_sqft": round(self.measurements.wall_sqft, 2),
            "insulation": self.insulation.to_dict() if self.insulation else None,
            "fasteners": self.fasteners.to_dict() if self.fasteners else None,
            "line_items": [item.to_dict() for item in self.line_items],
            "categories": [
                {
                    "category": category.value,
                    "subtotal": round(sum(i.total_cost for i in items), 2),
                    "item_ids": [i.row_id for i in items],
                }
                for category, items in self.by_category().items()
            ],
            "total_material_cost": self.total_material_cost,
        }


def compile_estimate(
    entries: list[TakeoffEntry],
    prices: PriceOverrideState,
    system: RoofSystem,
    measurements: RoofMeasurements | None = None,
    insulation: InsulationSummary | None = None,
    fasteners: FastenerResolution | None = None,
) -> Estimate:
    """
    Price the takeoff into line items grouped in the catalog's category order.

    Pure: the same entries and prices always give the same list. Entries
    pointing at products that are no longer in the catalog (stale saved data)
    are dropped rather than failing the whole estimate.
    """
    items = []
    for entry in entries:
        product = system.get_product(entry.product_id)
        if product is None:
            logger.warning(f"{system.id}: dropping line for unknown product {entry.product_id}")
            continue
        unit_price = resolve_price(product.id, prices, system)
        units = entry.units_to_order
        items.append(LineItem(
            product=product,
            raw_quantity=entry.raw_quantity,
            units_to_order=units,
            unit_price=unit_price,
            total_cost=round(units * unit_price, 2),
            note=entry.note,
            zone=entry.zone,
            pieces=entry.pieces,
        ))

    # stable: keeps takeoff order inside a category
    items.sort(key=lambda item: system.category_index(item.category))

    return Estimate(
        system_id=system.id,
        measurements=measurements or RoofMeasurements(),
        line_items=tuple(items),
        total_material_cost=round(sum(item.total_cost for item in items), 2),
        insulation=insulation,
        fasteners=fasteners,
    )


def run_estimate(
    system: RoofSystem,
    assembly: AssemblyConfig | None,
    m: RoofMeasurements,
    prices: PriceOverrideState,
) -> Estimate:
    """Insulation -> fasteners -> takeoff -> compile, in that order."""
    if system.kind == "single-ply":
        summary = summarize_insulation(
            assembly.insulation_layers, assembly.insulation_enabled, system.insulation_r_per_inch,
        )
        resolution = resolve_fasteners(assembly, summary, system)
    else:
        summary = InsulationSummary()
        resolution = None
    entries = calculate_takeoff(system, assembly, m, summary, resolution)
    return compile_estimate(
        entries, prices, system,
        measurements=m,
        insulation=summary if system.kind == "single-ply" else None,
        fasteners=resolution,
    )


# ---------------------------------------------------------------------------
# Console report
# ---------------------------------------------------------------------------

def print_estimate(est: Estimate) -> None:
    """Pretty-print the quantity takeoff and cost estimate."""
    system = get_system(est.system_id)
    m = est.measurements

    print("=" * 72)
    print("  ROOFING QUANTITY TAKEOFF & MATERIAL ESTIMATE")
    print(f"  {system.name} ({system.manufacturer})")
    print("=" * 72)

    print(f"\n  Roof Area      : {m.roof_area_sqft:,.0f} sqft")
    if system.kind == "single-ply":
        print(f"  Base Flashing  : {m.base_flashing_lf:,.0f} LF ({m.base_flashing_sqft:,.0f} sqft)")
        print(f"  Walls          : {m.wall_lf:,.0f} LF x {m.wall_height_ft:g} ft")
    else:
        print(f"  Horiz. Seams   : {m.horizontal_seam_lf:,.0f} LF")
        print(f"  Vert. Seams    : {m.vertical_seam_lf:,.0f} LF")

    if est.insulation and est.insulation.layer_count:
        print(f"  Insulation     : {est.insulation.total_thickness:g}\" "
              f"(R-{est.insulation.total_r_value:.1f}, {est.insulation.layer_count} layer(s))")
    if est.fasteners:
        print(f"  Screw Length   : {est.fasteners.insulation_screw_length:g}\" insulation / "
              f"{est.fasteners.membrane_screw_length:g}\" membrane")

    for category, items in est.by_category().items():
        print(f"\n  {'-' * 68}")
        print(f"  {category.value.upper()}")
        print(f"  {'-' * 68}")
        for item in items:
            print(f"    {item.product.name}")
            print(f"      {item.units_to_order:,} x {item.product.unit}  @  "
                  f"${item.unit_price:,.2f}  =  ${item.total_cost:,.2f}")
            if item.note:
                print(f"      ** {item.note}")

    print(f"\n  {'-' * 50}")
    print(f"  TOTAL MATERIAL COST:  ${est.total_material_cost:>12,.2f}")
    if m.roof_area_sqft > 0:
        print(f"  Per sqft:             ${est.total_material_cost / m.roof_area_sqft:>12,.2f}")
    print("=" * 72)


def export_json(est: Estimate, output_path: str) -> None:
    """Write the estimate to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(est.to_dict(), f, indent=2)
    print(f"\nJSON estimate saved to: {output_path}")


# ---------------------------------------------------------------------------
# CLI - interactive measurement input
# ---------------------------------------------------------------------------

def _input_float(prompt: str, default: float | None = None) -> float:
    """Prompt for a float with optional default."""
    suffix = f" [{default}]" if default is not None else ""
    while True:
        raw = input(f"  {prompt}{suffix}: ").strip()
        if not raw and default is not None:
            return default
        try:
            return float(raw)
        except ValueError:
            print("    Please enter a number.")


def main():
    json_output = None
    system_id = settings.DEFAULT_SYSTEM

    if "--json" in sys.argv:
        idx = sys.argv.index("--json")
        if idx + 1 < len(sys.argv):
            json_output = sys.argv[idx + 1]

    if "--system" in sys.argv:
        idx = sys.argv.index("--system")
        if idx + 1 < len(sys.argv):
            system_id = sys.argv[idx + 1]

    if system_id not in ROOF_SYSTEMS:
        print(f"Unknown system '{system_id}'. Choose from: {', '.join(ROOF_SYSTEMS)}")
        sys.exit(1)
    system = get_system(system_id)

    print("=" * 60)
    print(f"  ROOF ESTIMATOR - {system.name}")
    print("=" * 60)
    print("\nEnter field measurements.\n")

    area = _input_float("Total roof area (sqft)")
    if system.kind == "single-ply":
        measurements = RoofMeasurements(
            roof_area_sqft=area,
            base_flashing_lf=_input_float("Base flashing (LF)", default=0.0),
            wall_lf=_input_float("Wall length (LF)", default=0.0),
            wall_height_ft=_input_float("Wall height (ft)", default=0.0),
        )
        assembly = default_assembly(system)
    else:
        measurements = RoofMeasurements(
            roof_area_sqft=area,
            horizontal_seam_lf=_input_float("Horizontal seams (LF)", default=0.0),
            vertical_seam_lf=_input_float("Vertical seams (LF)", default=0.0),
        )
        assembly = None

    for warning in validate_measurements(measurements, system):
        print(f"  WARNING: {warning}")

    print("\nCalculating estimate...\n")
    estimate = run_estimate(system, assembly, measurements, PriceOverrideState())
    print_estimate(estimate)

    if json_output:
        export_json(estimate, json_output)


if __name__ == "__main__":
    main()
