"""
Fastener resolution for mechanically attached assemblies.

Resolves "auto" screw lengths against the stocked length tables and splits
fastener counts across the wind-uplift zones of the roof (field, perimeter,
corner).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from backend.assembly import AUTO, AssemblyConfig, Explicit
from backend.database import INSULATION_SCREW_LENGTHS, MEMBRANE_SCREW_LENGTHS, RoofSystem
from backend.insulation import InsulationSummary


# ---------------------------------------------------------------------------
# Zone layout (FM / UL wind uplift zones on a typical rectangular roof)
# ---------------------------------------------------------------------------

FIELD_ZONE_RATIO = 0.70
PERIMETER_ZONE_RATIO = 0.22
CORNER_ZONE_RATIO = 0.08

ZONE_RATIOS = {
    "field": FIELD_ZONE_RATIO,
    "perimeter": PERIMETER_ZONE_RATIO,
    "corner": CORNER_ZONE_RATIO,
}

if not math.isclose(sum(ZONE_RATIOS.values()), 1.0, abs_tol=1e-9):
    raise ValueError(f"Fastener zone ratios must sum to 1.0, got {sum(ZONE_RATIOS.values())}")

# Fasteners per 4' x 8' insulation board
INSULATION_FASTENERS_PER_BOARD = {"field": 4, "perimeter": 8, "corner": 12}

# Fasteners per linear foot of membrane seam row (12" / 8" / 6" o.c.)
MEMBRANE_FASTENERS_PER_LF = {"field": 1.0, "perimeter": 1.5, "corner": 2.0}

# Minimum screw engagement into the deck
DECK_PENETRATION_IN = 1.0

# Seam plate and membrane lap the membrane screw passes through
SEAM_PLATE_ENGAGEMENT_IN = 1.0

INSULATION_LENGTHS_IN = tuple(float(n) for n, _price in INSULATION_SCREW_LENGTHS)
MEMBRANE_LENGTHS_IN = tuple(float(n) for n, _price in MEMBRANE_SCREW_LENGTHS)


def select_screw_length(required_depth: float, lengths: tuple) -> float:
    """Shortest stocked length reaching the required depth (longest if none does)."""
    for length in sorted(lengths):
        if length >= required_depth - 1e-9:
            return length
    return max(lengths)


def zone_quantities(total: int) -> dict[str, int]:
    """
    Split an integer fastener count across the zones by ratio.

    Uses largest-remainder apportionment so the zone counts always add back
    up to ``total`` exactly.
    """
    total = max(int(total), 0)
    exact = {zone: total * ratio for zone, ratio in ZONE_RATIOS.items()}
    counts = {zone: math.floor(value) for zone, value in exact.items()}
    leftover = total - sum(counts.values())
    zones = list(ZONE_RATIOS)
    by_remainder = sorted(zones, key=lambda z: (-(exact[z] - counts[z]), zones.index(z)))
    for zone in by_remainder[:leftover]:
        counts[zone] += 1
    return counts


@dataclass(frozen=True)
class FastenerResolution:
    insulation_screw_length: float
    membrane_screw_length: float
    insulation_required_depth: float
    membrane_required_depth: float
    insulation_auto: bool = True
    membrane_auto: bool = True

    def zone_quantities(self, total: int) -> dict[str, int]:
        return zone_quantities(total)

    def to_dict(self) -> dict:
        return {
            "insulation_screw_length": self.insulation_screw_length,
            "membrane_screw_length": self.membrane_screw_length,
            "insulation_required_depth": round(self.insulation_required_depth, 2),
            "membrane_required_depth": round(self.membrane_required_depth, 2),
            "insulation_auto": self.insulation_auto,
            "membrane_auto": self.membrane_auto,
        }


def cover_board_thickness(assembly: AssemblyConfig, system: RoofSystem) -> float:
    _pid, thickness = system.cover_boards.get(assembly.cover_board, (None, 0.0))
    return thickness


def resolve_fasteners(
    assembly: AssemblyConfig,
    summary: InsulationSummary,
    system: RoofSystem,
) -> FastenerResolution:
    """Resolve both screw lengths for the assembly.

    Runs for every attachment method; fully adhered takeoffs simply ignore it.
    """
    insulation_depth = (summary.total_thickness
                        + cover_board_thickness(assembly, system)
                        + DECK_PENETRATION_IN)
    membrane_depth = SEAM_PLATE_ENGAGEMENT_IN + DECK_PENETRATION_IN

    ins_length = assembly.insulation_fastener_length
    if isinstance(ins_length, Explicit):
        insulation_screw = ins_length.inches
    else:
        insulation_screw = select_screw_length(insulation_depth, INSULATION_LENGTHS_IN)

    mem_length = assembly.membrane_fastener_length
    if isinstance(mem_length, Explicit):
        membrane_screw = mem_length.inches
    else:
        membrane_screw = select_screw_length(membrane_depth, MEMBRANE_LENGTHS_IN)

    return FastenerResolution(
        insulation_screw_length=insulation_screw,
        membrane_screw_length=membrane_screw,
        insulation_required_depth=insulation_depth,
        membrane_required_depth=membrane_depth,
        insulation_auto=ins_length == AUTO,
        membrane_auto=mem_length == AUTO,
    )
