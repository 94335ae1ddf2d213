"""
Package price resolution - turnkey prices for DCR, NON DCR and BOTH systems.

Package prices are exact lookups. They are not assumed to be linear in size,
so there is no interpolation here: a key the catalog does not tabulate
returns None and the caller decides what to fall back to.
"""
import logging
from typing import Optional

from .catalog import PricingCatalog, clean_label, resolve_catalog
from .models import Phase
from .sizes import parse_kw

logger = logging.getLogger(__name__)


def normalize_brand(brand: str, catalog: Optional[PricingCatalog] = None) -> str:
    """
    Map a panel brand onto the catalog's reference brands.

    Package tables are only priced for the reference brands; any other brand
    is priced as the default reference brand.
    """
    catalog = resolve_catalog(catalog)
    brand = clean_label(brand)
    if brand in catalog.reference_brands:
        return brand
    logger.debug("Brand %r is not a reference brand, using %s", brand, catalog.default_reference_brand)
    return catalog.default_reference_brand


def _system_price(table: str, system_size, phase, inverter_size, panel_brand,
                  catalog: Optional[PricingCatalog]) -> Optional[float]:
    catalog = resolve_catalog(catalog)
    phase = Phase.parse(phase)
    system_kw = parse_kw(system_size)
    inverter_kw = parse_kw(inverter_size)
    if phase is None or system_kw is None or inverter_kw is None:
        return None

    row = catalog.find_system_price(table, system_kw, phase, inverter_kw,
                                    normalize_brand(panel_brand, catalog))
    if row is None:
        logger.debug("No %s package price for %s %s %s inverter", table, system_size,
                     phase.value, inverter_size)
        return None
    return row.price


def get_dcr_price(system_size, phase, inverter_size, panel_brand,
                  catalog: Optional[PricingCatalog] = None) -> Optional[float]:
    """Package price of a DCR system, or None if not tabulated."""
    return _system_price('dcr', system_size, phase, inverter_size, panel_brand, catalog)


def get_non_dcr_price(system_size, phase, inverter_size, panel_brand,
                      catalog: Optional[PricingCatalog] = None) -> Optional[float]:
    """Package price of a NON DCR system, or None if not tabulated."""
    return _system_price('non_dcr', system_size, phase, inverter_size, panel_brand, catalog)


def get_both_price(system_size, phase, inverter_size, dcr_capacity, non_dcr_capacity, panel_brand,
                   catalog: Optional[PricingCatalog] = None) -> Optional[float]:
    """Package price of a mixed system split into DCR and NON DCR capacity."""
    catalog = resolve_catalog(catalog)
    phase = Phase.parse(phase)
    sizes = [parse_kw(s) for s in (system_size, inverter_size, dcr_capacity, non_dcr_capacity)]
    if phase is None or any(s is None for s in sizes):
        return None

    system_kw, inverter_kw, dcr_kw, non_dcr_kw = sizes
    row = catalog.find_both_price(system_kw, phase, inverter_kw, dcr_kw, non_dcr_kw,
                                  normalize_brand(panel_brand, catalog))
    return row.price if row is not None else None
