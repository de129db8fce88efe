"""
Central product catalog for the supported roofing systems.

Every system ships a fixed table of purchasable products (membranes, boards,
adhesives, fasteners, accessories, coatings) with its purchase unit, coverage
per unit and default unit price. Prices here are distributor list prices and
act as the last fallback for the price resolver in pricing.py.

Referenced by assembly.py (option sets), roof_estimator.py (takeoff) and
pricing.py (default prices).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    # single-ply (TPO) assemblies
    VAPOR_BARRIER = "Vapor Barrier"
    INSULATION = "Insulation"
    COVER_BOARD = "Cover Board"
    MEMBRANE = "Membrane"
    ADHESIVE = "Adhesive"
    FASTENERS = "Fasteners & Plates"
    FLASHING = "Flashing"
    ACCESSORIES = "Accessories"
    # fluid-applied coating over metal
    PREPARATION = "Preparation"
    PRIMER = "Primer"
    HORIZONTAL_SEAM = "Horizontal Seam Sealing"
    VERTICAL_SEAM = "Vertical Seam Sealing"
    BASE_COAT = "Base Coat"
    FINISH_COAT = "Finish Coat"


SINGLE_PLY_CATEGORIES = (
    Category.VAPOR_BARRIER,
    Category.INSULATION,
    Category.COVER_BOARD,
    Category.MEMBRANE,
    Category.ADHESIVE,
    Category.FASTENERS,
    Category.FLASHING,
    Category.ACCESSORIES,
)

COATING_CATEGORIES = (
    Category.PREPARATION,
    Category.PRIMER,
    Category.HORIZONTAL_SEAM,
    Category.VERTICAL_SEAM,
    Category.BASE_COAT,
    Category.FINISH_COAT,
)

# Which measurement drives a product's quantity
MEASURES = ("area", "linear", "count", "horizontal_seam", "vertical_seam")


@dataclass(frozen=True)
class Product:
    """A purchasable catalog item. Never mutated after load."""

    id: str
    name: str
    category: Category
    unit: str
    coverage: float        # sq ft / lin ft / pieces covered by one purchase unit
    default_price: float
    measure: str = "area"
    description: str = ""


@dataclass(frozen=True)
class RoofSystem:
    id: str
    name: str
    manufacturer: str
    kind: str  # "single-ply" | "coating"
    categories: tuple
    products: dict = field(default_factory=dict)
    vapor_barriers: dict = field(default_factory=dict)   # option -> product id
    cover_boards: dict = field(default_factory=dict)     # option -> (product id, thickness in)
    fastener_types: dict = field(default_factory=dict)   # option -> label
    default_fastener_type: str = ""
    insulation_r_per_inch: float = 5.6

    def get_product(self, product_id: str) -> Product | None:
        return self.products.get(product_id)

    def category_index(self, category: Category) -> int:
        return self.categories.index(category)


# ---------------------------------------------------------------------------
# Assembly option sets shared by the single-ply systems
# ---------------------------------------------------------------------------

DECK_TYPES = {
    "steel-22ga": "22 Gauge Steel Deck",
    "steel-20ga": "20 Gauge Steel Deck",
    "concrete": "Structural Concrete",
    "plywood": "Plywood",
    "osb": "OSB",
    "lwic": "Lightweight Insulating Concrete (LWIC)",
}

MEMBRANE_THICKNESSES = {
    "45mil": "45 mil TPO",
    "60mil": "60 mil TPO",
    "80mil": "80 mil TPO",
}

ATTACHMENT_METHODS = {
    "fully-adhered": "Fully Adhered",
    "mechanically-attached": "Mechanically Attached",
}

# Polyiso board thicknesses (inches) and board price (4' x 8')
INSULATION_THICKNESSES = (
    ("1.0", 32), ("1.5", 42), ("1.6", 44), ("2.0", 52),
    ("2.2", 56), ("2.5", 62), ("3.0", 72), ("3.1", 74),
    ("3.3", 78), ("3.5", 82), ("4.0", 92), ("4.3", 98),
    ("4.5", 102), ("5.0", 112), ("5.5", 122), ("6.0", 132),
)

# Insulation screw lengths (inches) and price per box of 1,000
INSULATION_SCREW_LENGTHS = (
    (2, 67), (3, 78), (4, 95), (5, 110), (6, 125), (7, 140), (8, 158),
)

MEMBRANE_SCREW_LENGTHS = ((2, 72),)

# Plate selection -> product id
INSULATION_PLATE_TYPES = {"3in-round": "fastener-plates-3in"}
MEMBRANE_PLATE_TYPES = {"barbed": "fastener-plates-barbed"}


def insulation_product_id(thickness: str) -> str:
    return f"insulation-{thickness}"


def screw_product_id(length_in: float) -> str:
    return f"fastener-screws-{length_in:g}in"


def membrane_screw_product_id(length_in: float) -> str:
    return f"fastener-screws-membrane-{length_in:g}in"


# ---------------------------------------------------------------------------
# Product rows
# Format: (id, name, category, unit, coverage, default_price, measure, description)
# ---------------------------------------------------------------------------

_BOARD = "Board (4' x 8')"
_BOX = "Box (1,000)"


def _insulation_rows(r_per_inch: float) -> list[tuple]:
    rows = []
    for thickness, price in INSULATION_THICKNESSES:
        r_value = round(float(thickness) * r_per_inch, 1)
        rows.append((
            insulation_product_id(thickness),
            f'{thickness}" Polyiso Insulation (R-{r_value})',
            Category.INSULATION, _BOARD, 32, price, "area",
            f"{thickness} inch polyisocyanurate roof insulation board",
        ))
    return rows


def _screw_rows(brand: str) -> list[tuple]:
    rows = []
    for length, price in INSULATION_SCREW_LENGTHS:
        gauge = "#12" if length == 2 else "#14"
        rows.append((
            screw_product_id(length),
            f'{gauge} x {length}" HD Roofing Screws',
            Category.FASTENERS, _BOX, 1000, price, "count",
            f"{brand} roofing screws for insulation attachment",
        ))
    for length, price in MEMBRANE_SCREW_LENGTHS:
        rows.append((
            membrane_screw_product_id(length),
            f'#15 x {length}" Membrane Attachment Screws',
            Category.FASTENERS, _BOX, 1000, price, "count",
            "Coarse-thread screws for mechanically attaching TPO membrane in seam rows",
        ))
    return rows


_PLATE_ROWS = [
    ("fastener-plates-3in", '3" Round Insulation Stress Plates',
     Category.FASTENERS, _BOX, 1000, 232, "count",
     "Galvalume coated steel stress plates for insulation attachment"),
    ("fastener-plates-barbed", '2" Barbed Seam Plates',
     Category.FASTENERS, _BOX, 1000, 198, "count",
     "Barbed stress plates for mechanically attached membrane seam rows"),
    ("fastener-plates-perimeter", '3" Heavy-Duty Perimeter Plates',
     Category.FASTENERS, "Box (500)", 500, 165, "count",
     "Heavy-duty galvalume stress plates for perimeter and corner zones"),
]

_CARLISLE_ROWS = [
    ("vb-725tr", "VapAir Seal 725TR (Self-Adhering)",
     Category.VAPOR_BARRIER, "Roll (36\" x 100')", 300, 300, "area",
     "Self-adhering air and vapor barrier sheet"),
    ("vb-md", "VapAir Seal MD (Metal Deck)",
     Category.VAPOR_BARRIER, "Roll (36\" x 167')", 500, 350, "area",
     "Vapor barrier for steel deck applications"),
    ("vb-barritech", "Barritech VP (Spray-Applied)",
     Category.VAPOR_BARRIER, "5 Gallon Pail", 500, 250, "area",
     "Spray-applied vapor barrier"),
    *_insulation_rows(5.6),
    ("cover-densdeck-half", 'DensDeck Prime 1/2" Roof Board',
     Category.COVER_BOARD, _BOARD, 32, 40, "area",
     "Georgia-Pacific DensDeck Prime gypsum cover board"),
    ("cover-densdeck-quarter", 'DensDeck Prime 1/4" Roof Board',
     Category.COVER_BOARD, _BOARD, 32, 28, "area",
     "Georgia-Pacific DensDeck Prime gypsum cover board"),
    ("cover-securshield", 'SecurShield HD 1/2" Polyiso Cover Board',
     Category.COVER_BOARD, _BOARD, 32, 28, "area",
     "High-density polyiso cover board"),
    ("cover-perlite", 'Perlite 1/2" Cover Board',
     Category.COVER_BOARD, _BOARD, 32, 22, "area",
     "Perlite-based cover board for roof assemblies"),
    ("membrane-45mil", "Sure-Weld TPO 45 mil Membrane",
     Category.MEMBRANE, "Roll (10' x 100')", 1000, 750, "area",
     "Carlisle Sure-Weld reinforced TPO membrane"),
    ("membrane-60mil", "Sure-Weld TPO 60 mil Membrane",
     Category.MEMBRANE, "Roll (10' x 100')", 1000, 987, "area",
     "Carlisle Sure-Weld reinforced TPO membrane"),
    ("membrane-80mil", "Sure-Weld TPO 80 mil Membrane",
     Category.MEMBRANE, "Roll (10' x 100')", 1000, 1350, "area",
     "Carlisle Sure-Weld reinforced TPO membrane"),
    ("adhesive-bonding", "Sure-Weld TPO Bonding Adhesive",
     Category.ADHESIVE, "5 Gallon Pail", 300, 235, "area",
     "Solvent-based bonding adhesive for fully adhered membrane"),
    ("adhesive-insulation", "FAST 100 Insulation Adhesive",
     Category.ADHESIVE, "5 Gallon Jug", 240, 225, "area",
     "Two-part low-rise foam adhesive for insulation boards"),
    ("adhesive-primer", "Sure-Weld TPO Primer",
     Category.ADHESIVE, "5 Gallon Pail", 500, 175, "area",
     "Primer for flashing substrates"),
    *_screw_rows("SFS Dekfast"),
    *_PLATE_ROWS,
    ("flash-membrane-24", 'TPO Non-Reinforced Flashing (24" x 50\')',
     Category.FLASHING, "Roll (24\" x 50')", 50, 175, "linear",
     "Non-reinforced TPO flashing for 18 inch base flashing"),
    ("flash-membrane-12", 'TPO Non-Reinforced Flashing (12" x 50\')',
     Category.FLASHING, "Roll (12\" x 50')", 50, 110, "linear",
     "Non-reinforced TPO flashing for wall terminations"),
    ("acc-coverstrip", 'TPO Pressure-Sensitive Coverstrip (6")',
     Category.ACCESSORIES, "Roll (100')", 100, 85, "linear",
     "Self-adhering TPO coverstrip for detail work"),
    ("acc-termbar", "Termination Bar",
     Category.ACCESSORIES, "Piece (10')", 10, 15, "linear",
     "Aluminum termination bar for securing membrane at walls"),
    ("acc-caulk", "Caulk / Sealant",
     Category.ACCESSORIES, "Tube (10.1 oz)", 25, 8, "linear",
     "Polyurethane sealant for termination bar and detail sealing"),
    ("acc-corners", "TPO Universal Corners",
     Category.ACCESSORIES, "Each", 1, 12, "count",
     "Pre-formed TPO corners for inside/outside corner details"),
    ("acc-pipe-boot", "TPO Pipe Boot",
     Category.ACCESSORIES, "Each", 1, 35, "count",
     "Pre-formed TPO pipe boot for roof penetrations"),
]

_GAF_ROWS = [
    ("vb-gaf-sa", "GAF EverGuard VaporGuard SA",
     Category.VAPOR_BARRIER, "Roll (36\" x 100')", 300, 310, "area",
     "GAF self-adhering air and vapor barrier sheet"),
    ("vb-gaf-spray", "GAF Spray Vapor Barrier",
     Category.VAPOR_BARRIER, "5 Gallon Pail", 500, 260, "area",
     "GAF spray-applied vapor barrier coating"),
    ("vb-bitec", "Bitec Vapor-Stop SA",
     Category.VAPOR_BARRIER, "Roll (39\" x 64')", 208, 195, "area",
     "Bitec Vapor-Stop self-adhering vapor barrier membrane"),
    *_insulation_rows(5.6),
    ("cover-densdeck-half", 'DensDeck Prime 1/2" Roof Board',
     Category.COVER_BOARD, _BOARD, 32, 40, "area",
     "Georgia-Pacific DensDeck Prime gypsum cover board"),
    ("cover-densdeck-quarter", 'DensDeck Prime 1/4" Roof Board',
     Category.COVER_BOARD, _BOARD, 32, 28, "area",
     "Georgia-Pacific DensDeck Prime gypsum cover board"),
    ("cover-securock", 'USG Securock 1/2" Roof Board',
     Category.COVER_BOARD, _BOARD, 32, 36, "area",
     "USG Securock gypsum-fiber roof board"),
    ("cover-perlite", 'Perlite 1/2" Cover Board',
     Category.COVER_BOARD, _BOARD, 32, 22, "area",
     "Perlite-based cover board for roof assemblies"),
    ("membrane-45mil", "EverGuard TPO 45 mil Membrane",
     Category.MEMBRANE, "Roll (10' x 100')", 1000, 680, "area",
     "GAF EverGuard reinforced TPO membrane"),
    ("membrane-60mil", "EverGuard TPO 60 mil Membrane",
     Category.MEMBRANE, "Roll (10' x 100')", 1000, 972, "area",
     "GAF EverGuard reinforced TPO membrane"),
    ("membrane-80mil", "EverGuard TPO 80 mil Membrane",
     Category.MEMBRANE, "Roll (10' x 100')", 1000, 1515, "area",
     "GAF EverGuard reinforced TPO membrane"),
    ("adhesive-bonding", "EverGuard SBA 1121 Bonding Adhesive",
     Category.ADHESIVE, "5 Gallon Pail", 300, 179, "area",
     "GAF solvent-based contact adhesive for TPO membrane"),
    ("adhesive-insulation", "GAF LRF Adhesive XF (Canister Kit)",
     Category.ADHESIVE, "Canister Kit (Part A + B)", 2400, 1140, "area",
     "GAF two-component low-rise foam adhesive for insulation"),
    ("adhesive-primer", "EverGuard TPO Primer",
     Category.ADHESIVE, "1 Gallon Can", 225, 65, "area",
     "GAF TPO primer for non-porous substrates"),
    *_screw_rows("GAF Drill-Tec"),
    *_PLATE_ROWS,
    ("flash-membrane-24", "EverGuard TPO Detailing Membrane (24\" x 50')",
     Category.FLASHING, "Roll (24\" x 50')", 50, 350, "linear",
     "GAF unreinforced TPO for base flashing details"),
    ("flash-membrane-12", "EverGuard TPO Flashing Strip (8\" x 100')",
     Category.FLASHING, "Roll (8\" x 100')", 100, 288, "linear",
     "GAF TPO flashing strip for wall terminations"),
    ("acc-coverstrip", 'EverGuard TPO Cover Tape PS (6")',
     Category.ACCESSORIES, "Roll (100')", 100, 379, "linear",
     "GAF self-adhering TPO cover tape with butyl backing"),
    ("acc-termbar", "Termination Bar",
     Category.ACCESSORIES, "Piece (10')", 10, 15, "linear",
     "Aluminum termination bar for securing membrane at walls"),
    ("acc-caulk", "GAF Ultra Clear Thermoplastic Sealant",
     Category.ACCESSORIES, "Tube (10 oz)", 25, 13, "linear",
     "GAF sealant for termination bar and detail sealing"),
    ("acc-corners", "EverGuard TPO Universal Corners",
     Category.ACCESSORIES, "Each", 1, 14, "count",
     "GAF pre-formed TPO corners for inside/outside corner details"),
    ("acc-pipe-boot", "EverGuard TPO Pipe Boot",
     Category.ACCESSORIES, "Each", 1, 38, "count",
     "GAF pre-formed TPO pipe boot for roof penetrations"),
]

# Coverage rates from the Metal-Kynar 702-404-501 material list
_KARNAK_ROWS = [
    ("799", "799 Wash-N-Prep",
     Category.PREPARATION, "1 Quart", 1600, 10.65, "area",
     "Concentrated TSP substitute for cleaning roof surfaces before coating"),
    ("702", "702 K-Prep",
     Category.PRIMER, "5 Gallon Pail", 1000, 175.00, "area",
     "Acrylic primer for adhesion to weathered Kynar coated metal"),
    ("505ms-h", "505MS Karna-Flex WB (Horizontal)",
     Category.HORIZONTAL_SEAM, "5 Gallon Pail", 100, 175.00, "horizontal_seam",
     "Elastomeric mastic for horizontal seams, applied with Resat-Mat"),
    ("5540", "5540 Resat-Mat",
     Category.HORIZONTAL_SEAM, "6\" x 300' Roll", 300, 65.00, "horizontal_seam",
     "Polyester reinforcing fabric for mastic over horizontal seams"),
    ("505ms-v", "505MS Karna-Flex WB (Vertical)",
     Category.VERTICAL_SEAM, "5 Gallon Pail", 800, 175.00, "vertical_seam",
     "Elastomeric mastic bead along vertical seams"),
    ("404", "404 Corrosion Proof Base Coat",
     Category.BASE_COAT, "5 Gallon Pail", 333, 186.00, "area",
     "Self-priming modified acrylic base coat for metal"),
    ("501", "501 Elasto-Brite White",
     Category.FINISH_COAT, "5 Gallon Pail", 333, 186.00, "area",
     "Reflective elastomeric finish coat"),
]


# ---------------------------------------------------------------------------
# Registry build + load-time validation
# ---------------------------------------------------------------------------

def _build_products(rows: list[tuple], categories: tuple) -> dict[str, Product]:
    products: dict[str, Product] = {}
    for pid, name, category, unit, coverage, price, measure, description in rows:
        if pid in products:
            raise ValueError(f"Duplicate product id in catalog: {pid}")
        if coverage <= 0:
            raise ValueError(f"Product {pid} has non-positive coverage {coverage}")
        if price < 0:
            raise ValueError(f"Product {pid} has negative default price {price}")
        if category not in categories:
            raise ValueError(f"Product {pid} category {category.value!r} not offered by system")
        if measure not in MEASURES:
            raise ValueError(f"Product {pid} has unknown measure {measure!r}")
        products[pid] = Product(
            id=pid, name=name, category=category, unit=unit,
            coverage=float(coverage), default_price=float(price),
            measure=measure, description=description,
        )
    return products


def _validate_options(system: RoofSystem) -> RoofSystem:
    for option, pid in system.vapor_barriers.items():
        if pid not in system.products:
            raise ValueError(f"{system.id}: vapor barrier {option} -> unknown product {pid}")
    for option, (pid, _thickness) in system.cover_boards.items():
        if pid not in system.products:
            raise ValueError(f"{system.id}: cover board {option} -> unknown product {pid}")
    return system


ROOF_SYSTEMS: dict[str, RoofSystem] = {
    "carlisle-tpo": _validate_options(RoofSystem(
        id="carlisle-tpo",
        name="Carlisle Sure-Weld TPO",
        manufacturer="Carlisle SynTec",
        kind="single-ply",
        categories=SINGLE_PLY_CATEGORIES,
        products=_build_products(_CARLISLE_ROWS, SINGLE_PLY_CATEGORIES),
        vapor_barriers={
            "vapair-725tr": "vb-725tr",
            "vapair-md": "vb-md",
            "barritech-vp": "vb-barritech",
        },
        cover_boards={
            "densdeck-prime-half": ("cover-densdeck-half", 0.5),
            "densdeck-prime-quarter": ("cover-densdeck-quarter", 0.25),
            "securshield-hd": ("cover-securshield", 0.5),
            "perlite": ("cover-perlite", 0.5),
        },
        fastener_types={
            "sfs-dekfast": "SFS Dekfast #14",
            "carlisle-hp": "Carlisle HP Fastener",
        },
        default_fastener_type="sfs-dekfast",
    )),
    "gaf-tpo": _validate_options(RoofSystem(
        id="gaf-tpo",
        name="GAF EverGuard TPO",
        manufacturer="GAF",
        kind="single-ply",
        categories=SINGLE_PLY_CATEGORIES,
        products=_build_products(_GAF_ROWS, SINGLE_PLY_CATEGORIES),
        vapor_barriers={
            "gaf-vb-sa": "vb-gaf-sa",
            "gaf-vb-spray": "vb-gaf-spray",
            "bitec-vs": "vb-bitec",
        },
        cover_boards={
            "densdeck-prime-half": ("cover-densdeck-half", 0.5),
            "densdeck-prime-quarter": ("cover-densdeck-quarter", 0.25),
            "securock-half": ("cover-securock", 0.5),
            "perlite": ("cover-perlite", 0.5),
        },
        fastener_types={
            "gaf-drilltec-14": "Drill-Tec #14",
            "gaf-drilltec-xhd": "Drill-Tec XHD",
        },
        default_fastener_type="gaf-drilltec-14",
    )),
    "karnak-metal-kynar": RoofSystem(
        id="karnak-metal-kynar",
        name="Karnak Metal Kynar 702-404-501",
        manufacturer="Karnak",
        kind="coating",
        categories=COATING_CATEGORIES,
        products=_build_products(_KARNAK_ROWS, COATING_CATEGORIES),
    ),
}


def get_system(system_id: str) -> RoofSystem:
    """Look up a roofing system. Raises ValueError for an unknown id."""
    try:
        return ROOF_SYSTEMS[system_id]
    except KeyError:
        raise ValueError(f"Unknown roof system: {system_id}") from None


def get_product(system_id: str, product_id: str) -> Product | None:
    return get_system(system_id).get_product(product_id)
