"""
Pricing catalog - immutable container for every lookup table the engine reads.

A catalog is built once (from an external source or the bundled defaults) and
never mutated. To refresh pricing, build a new catalog and swap the reference.
"""
import logging
from dataclasses import dataclass, field, fields
from functools import lru_cache
from typing import Callable, Iterable, Optional

from .models import (
    BothSystemPrice,
    CablePrice,
    DistributionBoardPrice,
    InverterPrice,
    MeterPrice,
    PanelPrice,
    StructurePrice,
    SystemConfigurationPreset,
    SystemPrice,
)

logger = logging.getLogger(__name__)

REFERENCE_BRANDS = ("Adani", "Waaree", "Tata")
DEFAULT_REFERENCE_BRAND = "Adani"

TABLE_NAMES = (
    'panels', 'inverters', 'structures', 'meters', 'cables', 'acdb', 'dcdb',
    'dcr', 'non_dcr', 'both', 'system_configs',
)


def _first_index(rows: Iterable, key: Callable) -> dict:
    """Map key -> first row with that key. Rows whose key has a None part are skipped."""
    index = {}
    for row in rows:
        k = key(row)
        parts = k if isinstance(k, tuple) else (k,)
        if any(p is None for p in parts):
            logger.debug("Skipping unindexable row %r", row)
            continue
        index.setdefault(k, row)
    return index


def _group(rows: Iterable, key: Callable) -> dict:
    groups: dict = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return {k: tuple(v) for k, v in groups.items()}


def clean_label(value) -> str:
    """Brand, type or size label as a stripped string; None is empty."""
    return str(value).strip() if value is not None else ""


@dataclass(frozen=True)
class PricingCatalog:
    """All pricing tables, read-only."""
    panels: tuple[PanelPrice, ...] = ()
    inverters: tuple[InverterPrice, ...] = ()
    structures: tuple[StructurePrice, ...] = ()
    meters: tuple[MeterPrice, ...] = ()
    cables: tuple[CablePrice, ...] = ()
    acdb: tuple[DistributionBoardPrice, ...] = ()
    dcdb: tuple[DistributionBoardPrice, ...] = ()
    dcr: tuple[SystemPrice, ...] = ()
    non_dcr: tuple[SystemPrice, ...] = ()
    both: tuple[BothSystemPrice, ...] = ()
    system_configs: tuple[SystemConfigurationPreset, ...] = ()

    reference_brands: tuple[str, ...] = REFERENCE_BRANDS
    default_reference_brand: str = DEFAULT_REFERENCE_BRAND

    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Accept any iterable for tables, store tuples
        for name in TABLE_NAMES:
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, 'reference_brands', tuple(self.reference_brands))
        object.__setattr__(self, '_index', self._build_index())

    def _build_index(self) -> dict:
        return {
            'panel': _first_index(self.panels, lambda r: (clean_label(r.brand), r.watts)),
            'panel_brand': _group(self.panels, lambda r: clean_label(r.brand)),
            'inverter': _first_index(self.inverters, lambda r: (clean_label(r.brand), r.kw)),
            'inverter_brand': _group(self.inverters, lambda r: clean_label(r.brand)),
            'structure': _first_index(self.structures, lambda r: (clean_label(r.type), r.kw)),
            'structure_type': _group(self.structures, lambda r: clean_label(r.type)),
            'meter': _first_index(self.meters, lambda r: clean_label(r.brand)),
            'cable': _first_index(self.cables, lambda r: (clean_label(r.brand), clean_label(r.size), r.circuit)),
            'cable_brand': _first_index(self.cables, lambda r: (clean_label(r.brand), r.circuit)),
            'acdb': _first_index(self.acdb, lambda r: (clean_label(r.brand), r.phase)),
            'dcdb': _first_index(self.dcdb, lambda r: (clean_label(r.brand), r.phase)),
            'dcr': _first_index(
                self.dcr, lambda r: (r.system_kw, r.phase, r.inverter_kw, clean_label(r.panel_brand))),
            'non_dcr': _first_index(
                self.non_dcr, lambda r: (r.system_kw, r.phase, r.inverter_kw, clean_label(r.panel_brand))),
            'both': _first_index(
                self.both,
                lambda r: (r.system_kw, r.phase, r.inverter_kw, r.dcr_kw, r.non_dcr_kw, clean_label(r.panel_brand))),
            'dcr_sizes': _first_index(self.dcr, lambda r: (r.system_kw, r.inverter_kw)),
            'non_dcr_sizes': _first_index(self.non_dcr, lambda r: (r.system_kw, r.inverter_kw)),
            'both_sizes': _first_index(self.both, lambda r: (r.system_kw, r.inverter_kw)),
        }

    # ------------------------------------------------------------------
    # Lookups (keys are already-parsed numbers)
    # ------------------------------------------------------------------

    def find_panel(self, brand: str, watts: float) -> Optional[PanelPrice]:
        return self._index['panel'].get((clean_label(brand), watts))

    def panels_for_brand(self, brand: str) -> tuple[PanelPrice, ...]:
        return self._index['panel_brand'].get(clean_label(brand), ())

    def find_inverter(self, brand: str, kw: float) -> Optional[InverterPrice]:
        return self._index['inverter'].get((clean_label(brand), kw))

    def inverters_for_brand(self, brand: str) -> tuple[InverterPrice, ...]:
        return self._index['inverter_brand'].get(clean_label(brand), ())

    def find_structure(self, structure_type: str, kw: float) -> Optional[StructurePrice]:
        return self._index['structure'].get((clean_label(structure_type), kw))

    def structures_for_type(self, structure_type: str) -> tuple[StructurePrice, ...]:
        return self._index['structure_type'].get(clean_label(structure_type), ())

    def find_meter(self, brand: str) -> Optional[MeterPrice]:
        return self._index['meter'].get(clean_label(brand))

    def find_cable(self, brand: str, size: str, circuit) -> Optional[CablePrice]:
        return self._index['cable'].get((clean_label(brand), clean_label(size), circuit))

    def find_cable_for_brand(self, brand: str, circuit) -> Optional[CablePrice]:
        return self._index['cable_brand'].get((clean_label(brand), circuit))

    def find_board(self, table: str, brand: str, phase) -> Optional[DistributionBoardPrice]:
        """Look up an 'acdb' or 'dcdb' row."""
        return self._index[table].get((clean_label(brand), phase))

    def find_system_price(self, table: str, system_kw: float, phase, inverter_kw: float,
                          panel_brand: str) -> Optional[SystemPrice]:
        """Exact package row in the 'dcr' or 'non_dcr' table."""
        return self._index[table].get((system_kw, phase, inverter_kw, clean_label(panel_brand)))

    def find_both_price(self, system_kw: float, phase, inverter_kw: float, dcr_kw: float,
                        non_dcr_kw: float, panel_brand: str) -> Optional[BothSystemPrice]:
        return self._index['both'].get(
            (system_kw, phase, inverter_kw, dcr_kw, non_dcr_kw, clean_label(panel_brand)))

    def find_by_sizes(self, table: str, system_kw: float, inverter_kw: float):
        """First package row in 'dcr', 'non_dcr' or 'both' with this size pair, any brand."""
        return self._index[f'{table}_sizes'].get((system_kw, inverter_kw))

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_tables(cls, tables: dict, defaults: Optional['PricingCatalog'] = None,
                    **options) -> 'PricingCatalog':
        """
        Build a catalog from a {table_name: rows} mapping.

        Tables that are absent (or None) are taken from `defaults` when given;
        a table that is present but empty stays empty.
        """
        kwargs = {}
        for name in TABLE_NAMES:
            rows = tables.get(name)
            if rows is None and defaults is not None:
                rows = getattr(defaults, name)
                logger.debug("Table %s not supplied, using defaults (%d rows)", name, len(rows))
            kwargs[name] = tuple(rows or ())
        kwargs.update({k: v for k, v in options.items() if v is not None})
        return cls(**kwargs)

    def table_sizes(self) -> dict[str, int]:
        """Row count per table."""
        return {f.name: len(getattr(self, f.name)) for f in fields(self) if f.name in TABLE_NAMES}


@lru_cache(maxsize=1)
def default_catalog() -> PricingCatalog:
    """The bundled default catalog, loaded once from the package's CSV tables."""
    from ..data.catalog_loader import load_catalog_dir
    from ..config.settings import default_catalog_dir

    catalog = load_catalog_dir(default_catalog_dir(), fill_defaults=False)
    logger.info("Loaded default pricing catalog: %s", catalog.table_sizes())
    return catalog


def resolve_catalog(catalog: Optional[PricingCatalog]) -> PricingCatalog:
    """Return `catalog`, or the bundled default when none is supplied."""
    return catalog if catalog is not None else default_catalog()
