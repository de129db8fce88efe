"""Insulation stack aggregation: total thickness and R-value of the active layers."""

from __future__ import annotations

import math
from dataclasses import dataclass

from backend.assembly import NO_INSULATION


@dataclass(frozen=True)
class ActiveLayer:
    slot: int
    thickness: str
    inches: float
    r_value: float

    @property
    def label(self) -> str:
        return f'{self.thickness}" Polyiso (R-{self.r_value:g})'


@dataclass(frozen=True)
class InsulationSummary:
    total_thickness: float = 0.0
    total_r_value: float = 0.0
    active_layers: tuple = ()

    @property
    def layer_count(self) -> int:
        return len(self.active_layers)

    def to_dict(self) -> dict:
        return {
            "total_thickness": round(self.total_thickness, 2),
            "total_r_value": round(self.total_r_value, 2),
            "active_layers": [
                {"slot": layer.slot, "thickness": layer.thickness,
                 "r_value": round(layer.r_value, 2), "label": layer.label}
                for layer in self.active_layers
            ],
        }


def _parse_inches(thickness: str) -> float:
    try:
        inches = float(thickness)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(inches) or inches <= 0:
        return 0.0
    return inches


def summarize_insulation(layers, enabled: bool, r_per_inch: float) -> InsulationSummary:
    """
    Reduce the insulation layers to total thickness and R-value.

    The master flag short-circuits to an empty summary without touching the
    layers, so re-enabling brings back the same stack. Only enabled layers
    with a real thickness count; an unparseable thickness contributes nothing.
    """
    if not enabled:
        return InsulationSummary()

    active = []
    for slot, layer in enumerate(layers):
        if not layer.enabled or layer.thickness == NO_INSULATION:
            continue
        inches = _parse_inches(layer.thickness)
        if inches == 0.0:
            continue
        active.append(ActiveLayer(slot, layer.thickness, inches, inches * r_per_inch))

    return InsulationSummary(
        total_thickness=sum(layer.inches for layer in active),
        total_r_value=sum(layer.r_value for layer in active),
        active_layers=tuple(active),
    )
