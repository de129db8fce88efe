"""
Roof assembly configuration for the single-ply systems.

Holds the estimator's current selections (deck, vapor barrier, insulation
stack, cover board, membrane, attachment, fasteners) and the setter
operations used to change them. Option values are validated against the
catalog of the system being estimated.

Usage:
    assembly = default_assembly(get_system("carlisle-tpo"))
    assembly.add_insulation_layer("1.5")
    assembly.set_attachment_method("mechanically-attached")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from backend.database import (
    ATTACHMENT_METHODS,
    DECK_TYPES,
    INSULATION_PLATE_TYPES,
    INSULATION_SCREW_LENGTHS,
    INSULATION_THICKNESSES,
    MEMBRANE_PLATE_TYPES,
    MEMBRANE_SCREW_LENGTHS,
    MEMBRANE_THICKNESSES,
    RoofSystem,
)

MAX_INSULATION_LAYERS = 4
NO_INSULATION = "none"
NO_SELECTION = "none"

INSULATION_OPTIONS = tuple(t for t, _price in INSULATION_THICKNESSES)


# ---------------------------------------------------------------------------
# Fastener length: either an explicit screw length or "auto"
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Explicit:
    inches: float

    def __str__(self) -> str:
        return f"{self.inches:g}in"


@dataclass(frozen=True)
class Auto:
    def __str__(self) -> str:
        return "auto"


AUTO = Auto()

FastenerLength = Explicit | Auto

_LENGTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:in|\")?\s*$", re.IGNORECASE)


def parse_fastener_length(value) -> FastenerLength:
    """Parse "auto" or a length such as "4in" / 4. Raises ValueError otherwise."""
    if isinstance(value, (Explicit, Auto)):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if value <= 0:
            raise ValueError(f"Fastener length must be positive: {value}")
        return Explicit(float(value))
    text = str(value).strip().lower()
    if text == "auto":
        return AUTO
    match = _LENGTH_RE.match(text)
    if not match or float(match.group(1)) <= 0:
        raise ValueError(f"Invalid fastener length: {value!r}")
    return Explicit(float(match.group(1)))


_FASTENER_LENGTH_OPTIONS = {
    "insulation": tuple(float(n) for n, _price in INSULATION_SCREW_LENGTHS),
    "membrane": tuple(float(n) for n, _price in MEMBRANE_SCREW_LENGTHS),
}


# ---------------------------------------------------------------------------
# Assembly configuration
# ---------------------------------------------------------------------------

@dataclass
class InsulationLayer:
    thickness: str = NO_INSULATION
    enabled: bool = False


def _empty_layers() -> list[InsulationLayer]:
    return [InsulationLayer() for _ in range(MAX_INSULATION_LAYERS)]


@dataclass
class AssemblyConfig:
    """Current roof assembly selections for one estimating session."""

    system_id: str
    deck_type: str = "steel-22ga"
    vapor_barrier: str = NO_SELECTION
    insulation_enabled: bool = True
    insulation_layers: list[InsulationLayer] = field(default_factory=_empty_layers)
    cover_board: str = "densdeck-prime-half"
    membrane_thickness: str = "60mil"
    attachment_method: str = "fully-adhered"
    fastener_type: str = ""
    insulation_fastener_length: FastenerLength = AUTO
    membrane_fastener_length: FastenerLength = AUTO
    plate_type: str = "3in-round"
    membrane_plate_type: str = "barbed"

    # --- insulation stack ---

    def add_insulation_layer(self, thickness: str) -> int | None:
        """Fill the first disabled slot. Returns the slot index, None when full."""
        _check_option("insulation thickness", thickness, INSULATION_OPTIONS)
        for index, layer in enumerate(self.insulation_layers):
            if not layer.enabled:
                self.insulation_layers[index] = InsulationLayer(thickness, True)
                return index
        return None

    def remove_insulation_layer(self, index: int) -> None:
        # Clears in place; later layers keep their slot numbers.
        self._check_slot(index)
        self.insulation_layers[index] = InsulationLayer(NO_INSULATION, False)

    def set_layer_thickness(self, index: int, thickness: str) -> None:
        self._check_slot(index)
        if thickness == NO_INSULATION:
            self.insulation_layers[index] = InsulationLayer(NO_INSULATION, False)
            return
        _check_option("insulation thickness", thickness, INSULATION_OPTIONS)
        self.insulation_layers[index] = InsulationLayer(thickness, True)

    def set_insulation_enabled(self, enabled: bool) -> None:
        self.insulation_enabled = bool(enabled)

    def _check_slot(self, index: int) -> None:
        if not 0 <= index < len(self.insulation_layers):
            raise ValueError(f"Insulation layer index out of range: {index}")

    # --- single selections ---

    def set_deck_type(self, deck_type: str) -> None:
        _check_option("deck type", deck_type, DECK_TYPES)
        self.deck_type = deck_type

    def set_vapor_barrier(self, system: RoofSystem, option: str) -> None:
        _check_option("vapor barrier", option, (NO_SELECTION, *system.vapor_barriers))
        self.vapor_barrier = option

    def set_cover_board(self, system: RoofSystem, option: str) -> None:
        _check_option("cover board", option, (NO_SELECTION, *system.cover_boards))
        self.cover_board = option

    def set_membrane_thickness(self, thickness: str) -> None:
        _check_option("membrane thickness", thickness, MEMBRANE_THICKNESSES)
        self.membrane_thickness = thickness

    def set_attachment_method(self, method: str) -> None:
        _check_option("attachment method", method, ATTACHMENT_METHODS)
        self.attachment_method = method

    def set_fastener_type(self, system: RoofSystem, option: str) -> None:
        _check_option("fastener type", option, system.fastener_types)
        self.fastener_type = option

    def set_fastener_length(self, kind: str, value) -> None:
        """kind is "insulation" or "membrane"; value is "auto" or a length."""
        if kind not in _FASTENER_LENGTH_OPTIONS:
            raise ValueError(f"Unknown fastener kind: {kind}")
        length = parse_fastener_length(value)
        if isinstance(length, Explicit) and length.inches not in _FASTENER_LENGTH_OPTIONS[kind]:
            raise ValueError(f"No {kind} screw is stocked at {length}")
        if kind == "insulation":
            self.insulation_fastener_length = length
        else:
            self.membrane_fastener_length = length

    def set_plate_type(self, option: str) -> None:
        _check_option("plate type", option, INSULATION_PLATE_TYPES)
        self.plate_type = option

    def set_membrane_plate_type(self, option: str) -> None:
        _check_option("membrane plate type", option, MEMBRANE_PLATE_TYPES)
        self.membrane_plate_type = option

    @property
    def is_mechanically_attached(self) -> bool:
        return self.attachment_method == "mechanically-attached"

    def to_dict(self) -> dict:
        return {
            "deck_type": self.deck_type,
            "vapor_barrier": self.vapor_barrier,
            "insulation_enabled": self.insulation_enabled,
            "insulation_layers": [
                {"thickness": layer.thickness, "enabled": layer.enabled}
                for layer in self.insulation_layers
            ],
            "cover_board": self.cover_board,
            "membrane_thickness": self.membrane_thickness,
            "attachment_method": self.attachment_method,
            "fastener_type": self.fastener_type,
            "insulation_fastener_length": str(self.insulation_fastener_length),
            "membrane_fastener_length": str(self.membrane_fastener_length),
            "plate_type": self.plate_type,
            "membrane_plate_type": self.membrane_plate_type,
        }


def _check_option(label: str, value: str, allowed) -> None:
    if value not in allowed:
        raise ValueError(f"Invalid {label}: {value!r}")


def default_assembly(system: RoofSystem) -> AssemblyConfig:
    """Starting configuration for a new estimate."""
    assembly = AssemblyConfig(system_id=system.id, fastener_type=system.default_fastener_type)
    assembly.insulation_layers[0] = InsulationLayer("2.0", True)
    return assembly


def assembly_from_dict(system: RoofSystem, data: dict) -> AssemblyConfig:
    """Rebuild an assembly from its dict form, validating every option.

    Raises ValueError on any option the system does not offer.
    """
    assembly = AssemblyConfig(system_id=system.id, fastener_type=system.default_fastener_type)
    assembly.set_deck_type(data["deck_type"])
    assembly.set_vapor_barrier(system, data["vapor_barrier"])
    assembly.set_insulation_enabled(data["insulation_enabled"])
    layers = data["insulation_layers"]
    if len(layers) != MAX_INSULATION_LAYERS:
        raise ValueError(f"Expected {MAX_INSULATION_LAYERS} insulation layers, got {len(layers)}")
    for index, layer in enumerate(layers):
        assembly.set_layer_thickness(index, layer["thickness"])
        if not layer["enabled"]:
            assembly.insulation_layers[index].enabled = False
    assembly.set_cover_board(system, data["cover_board"])
    assembly.set_membrane_thickness(data["membrane_thickness"])
    assembly.set_attachment_method(data["attachment_method"])
    assembly.set_fastener_type(system, data["fastener_type"])
    assembly.set_fastener_length("insulation", data["insulation_fastener_length"])
    assembly.set_fastener_length("membrane", data["membrane_fastener_length"])
    assembly.set_plate_type(data["plate_type"])
    assembly.set_membrane_plate_type(data["membrane_plate_type"])
    return assembly
