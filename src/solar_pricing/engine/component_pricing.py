"""
Component price resolution - panels, inverters, structures, meters, cables,
ACDB and DCDB.

Every function returns a finite, non-negative number and never raises.
Sized components degrade through three tiers:

1. Exact catalog row
2. Another row of the same brand/type, scaled linearly by size
3. A built-in reference price scaled by size

Meters, cables and distribution boards have no size to scale by and fall back
to a flat default instead.
"""
import logging
import math
import re
from typing import Optional, Sequence

from .catalog import PricingCatalog, clean_label, resolve_catalog
from .models import Circuit, DistributionBoardPrice, Phase
from .sizes import format_kw, format_watts, parse_kw, parse_watts

logger = logging.getLogger(__name__)

# Reference prices per brand when the catalog has nothing for it
PANEL_BASE_PRICES = {
    "Adani": 25000,
    "Tata": 26000,
    "Waaree": 24000,
    "Vikram Solar": 24500,
    "RenewSys": 23500,
}
PANEL_BASE_DEFAULT = 24000
PANEL_BASE_WATTS = 440

INVERTER_BASE_PRICES = {
    "Growatt": 35000,
    "Solis": 32000,
    "Fronius": 45000,
    "Havells": 38000,
    "Polycab": 36000,
    "Delta": 40000,
}
INVERTER_BASE_DEFAULT = 35000
INVERTER_BASE_KW = 3

STRUCTURE_PRICE_PER_KW = 8000
METER_DEFAULT_PRICE = 5000
CABLE_DEFAULT_PRICE = 3000
BOARD_DEFAULT_PRICE = 2500

_BOARD_OPTION_RE = re.compile(r'^(.+?)\s*\((.+?)\)$')


def pick_base_row(rows: Sequence, target: float, size_of):
    """
    Choose the row to scale from.

    A target that is a whole multiple of a tabulated size scales from that size
    (the largest one if several divide it); otherwise the nearest size wins,
    first row on ties.
    """
    sized = [(size_of(r), r) for r in rows if size_of(r)]
    if not sized:
        return None

    multiples = []
    for size, row in sized:
        ratio = target / size
        if abs(ratio - round(ratio)) < 1e-9 and round(ratio) >= 1:
            multiples.append((size, row))
    if multiples:
        return max(multiples, key=lambda item: item[0])[1]

    best_size, best_row = sized[0]
    for size, row in sized[1:]:
        if abs(size - target) < abs(best_size - target):
            best_size, best_row = size, row
    return best_row


def _finite(price: float, component: str, brand, size) -> float:
    if math.isfinite(price):
        return price
    logger.warning("%s price for %r %r is out of range, using 0", component, brand, size)
    return 0


def get_panel_price(brand: str, size: str, catalog: Optional[PricingCatalog] = None) -> float:
    """Price of one panel of `brand` at `size` ("545W")."""
    if not brand or not size:
        logger.warning("Panel price requested without brand or size (brand=%r, size=%r)", brand, size)
        return 0
    watts = parse_watts(size)
    if watts is None or watts <= 0:
        logger.warning("Invalid panel size %r", size)
        return 0

    catalog = resolve_catalog(catalog)

    row = catalog.find_panel(brand, watts)
    if row is not None:
        return row.price

    base = pick_base_row(catalog.panels_for_brand(brand), watts, lambda r: r.watts)
    if base is not None:
        logger.debug("No %s %s panel row, scaling from %s", brand, size, base.size)
        return _finite(base.price * watts / base.watts, "Panel", brand, size)

    logger.debug("No %s panels in catalog, using reference price", brand)
    price = PANEL_BASE_PRICES.get(clean_label(brand), PANEL_BASE_DEFAULT) * (watts / PANEL_BASE_WATTS)
    return _finite(price, "Panel", brand, size)


def get_inverter_price(brand: str, size: str, catalog: Optional[PricingCatalog] = None) -> float:
    """Price of one `brand` inverter rated `size` ("5kW")."""
    if not brand or not size:
        logger.warning("Inverter price requested without brand or size (brand=%r, size=%r)", brand, size)
        return 0
    kw = parse_kw(size)
    if kw is None or kw <= 0:
        logger.warning("Invalid inverter size %r", size)
        return 0

    catalog = resolve_catalog(catalog)

    row = catalog.find_inverter(brand, kw)
    if row is not None:
        return row.price

    base = pick_base_row(catalog.inverters_for_brand(brand), kw, lambda r: r.kw)
    if base is not None:
        logger.debug("No %s %s inverter row, scaling from %s", brand, size, base.size)
        return _finite(base.price * kw / base.kw, "Inverter", brand, size)

    price = INVERTER_BASE_PRICES.get(clean_label(brand), INVERTER_BASE_DEFAULT) * (kw / INVERTER_BASE_KW)
    return _finite(price, "Inverter", brand, size)


def get_structure_price(structure_type: str, size: str, catalog: Optional[PricingCatalog] = None) -> float:
    """Mounting structure price for `size` ("5kW") of the given type."""
    if not structure_type or not size:
        logger.warning("Structure price requested without type or size (type=%r, size=%r)",
                       structure_type, size)
        return 0
    kw = parse_kw(size)
    if kw is None or kw <= 0:
        logger.warning("Invalid structure size %r", size)
        return 0

    catalog = resolve_catalog(catalog)

    row = catalog.find_structure(structure_type, kw)
    if row is not None:
        return row.price

    base = pick_base_row(catalog.structures_for_type(structure_type), kw, lambda r: r.kw)
    if base is not None:
        return _finite(base.price * kw / base.kw, "Structure", structure_type, size)

    return _finite(kw * STRUCTURE_PRICE_PER_KW, "Structure", structure_type, size)


def get_meter_price(brand: str, catalog: Optional[PricingCatalog] = None) -> float:
    row = resolve_catalog(catalog).find_meter(brand)
    return row.price if row is not None else METER_DEFAULT_PRICE


def get_cable_price(brand: str, size: str, circuit, catalog: Optional[PricingCatalog] = None) -> float:
    """Cable price by brand, size and circuit ("AC"/"DC"); any size of the brand if not exact."""
    catalog = resolve_catalog(catalog)
    circuit = Circuit.parse(circuit)
    if circuit is None:
        return CABLE_DEFAULT_PRICE

    row = catalog.find_cable(brand, size, circuit)
    if row is None:
        row = catalog.find_cable_for_brand(brand, circuit)
    return row.price if row is not None else CABLE_DEFAULT_PRICE


def _board_price(table: str, brand: str, phase, catalog: Optional[PricingCatalog]) -> float:
    phase = Phase.parse(phase)
    if phase is None:
        return BOARD_DEFAULT_PRICE
    row = resolve_catalog(catalog).find_board(table, brand, phase)
    return row.price if row is not None else BOARD_DEFAULT_PRICE


def get_acdb_price(brand: str, phase, catalog: Optional[PricingCatalog] = None) -> float:
    return _board_price('acdb', brand, phase, catalog)


def get_dcdb_price(brand: str, phase, catalog: Optional[PricingCatalog] = None) -> float:
    return _board_price('dcdb', brand, phase, catalog)


def get_acdb_options(phase, catalog: Optional[PricingCatalog] = None) -> list[DistributionBoardPrice]:
    """ACDB rows compatible with a phase."""
    phase = Phase.parse(phase)
    return [row for row in resolve_catalog(catalog).acdb if row.phase == phase]


def get_dcdb_options(phase, catalog: Optional[PricingCatalog] = None) -> list[DistributionBoardPrice]:
    phase = Phase.parse(phase)
    return [row for row in resolve_catalog(catalog).dcdb if row.phase == phase]


def format_board_option(brand: str, phase) -> str:
    """'Havells', 1-Phase -> 'Havells (1-Phase)'."""
    phase = Phase.parse(phase)
    return f"{brand} ({phase.value if phase else ''})"


def parse_board_option(option: str) -> Optional[tuple[str, Phase]]:
    """'Havells (1-Phase)' -> ('Havells', Phase.ONE_PHASE); None if not in that form."""
    if not option:
        return None
    match = _BOARD_OPTION_RE.match(option.strip())
    if not match:
        return None
    phase = Phase.parse(match.group(2))
    if phase is None:
        return None
    return match.group(1).strip(), phase


def available_panel_sizes(catalog: Optional[PricingCatalog] = None) -> list[str]:
    """Distinct panel wattages in the catalog, ascending, as labels."""
    watts = {row.watts for row in resolve_catalog(catalog).panels if row.watts}
    return [format_watts(w) for w in sorted(watts)]


def available_structure_sizes(catalog: Optional[PricingCatalog] = None) -> list[str]:
    kws = {row.kw for row in resolve_catalog(catalog).structures if row.kw}
    return [format_kw(kw) for kw in sorted(kws)]
