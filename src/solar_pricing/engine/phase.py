"""
Phase classification - decides 1-Phase vs 3-Phase for a system/inverter pair.

Catalog rows are authoritative. The heuristic only covers sizes the catalog
does not tabulate (or callers that have no catalog yet).
"""
import logging
from typing import Optional

from .catalog import PricingCatalog
from .models import Phase
from .sizes import parse_kw

logger = logging.getLogger(__name__)

# Business rules read off the package tables
THREE_PHASE_MIN_KW = 7
SINGLE_PHASE_RANGE_KW = (3, 6)


def _whole_kw(label) -> Optional[int]:
    kw = parse_kw(label)
    return int(kw) if kw is not None else None


def heuristic_phase(system_size, inverter_size) -> Phase:
    """
    Classify by size alone.

    - system >= 7 kW                    -> 3-Phase
    - inverter larger than the system   -> 3-Phase
    - 3-6 kW with a matching inverter   -> 1-Phase
    - anything else                     -> 1-Phase
    """
    system_kw = _whole_kw(system_size)
    inverter_kw = _whole_kw(inverter_size)
    if system_kw is None:
        return Phase.ONE_PHASE

    if system_kw >= THREE_PHASE_MIN_KW:
        return Phase.THREE_PHASE

    if inverter_kw is not None and inverter_kw > system_kw:
        return Phase.THREE_PHASE

    low, high = SINGLE_PHASE_RANGE_KW
    if low <= system_kw <= high and inverter_kw == system_kw:
        return Phase.ONE_PHASE

    return Phase.ONE_PHASE


def determine_phase(system_size, inverter_size, catalog: Optional[PricingCatalog] = None) -> Phase:
    """
    Resolve the phase for a system/inverter pair.

    Resolution order:
    1. DCR, then NON DCR package rows with the same sizes (any brand) -> recorded phase
    2. BOTH package rows with the same sizes -> 3-Phase (mixed systems are always 3-Phase)
    3. Size heuristic
    """
    if catalog is not None:
        system_kw = parse_kw(system_size)
        inverter_kw = parse_kw(inverter_size)
        if system_kw is not None and inverter_kw is not None:
            for table in ('dcr', 'non_dcr'):
                row = catalog.find_by_sizes(table, system_kw, inverter_kw)
                if row is not None:
                    return row.phase

            if catalog.find_by_sizes('both', system_kw, inverter_kw) is not None:
                return Phase.THREE_PHASE

        logger.debug("No package row for %s / %s inverter, using size heuristic",
                     system_size, inverter_size)

    return heuristic_phase(system_size, inverter_size)


def audit_phase_rules(catalog: PricingCatalog) -> list[dict]:
    """
    List package rows whose recorded phase disagrees with the size heuristic.

    The catalog still wins at resolution time; this is for review only.
    """
    findings = []
    for table in ('dcr', 'non_dcr', 'both'):
        for row in getattr(catalog, table):
            if table == 'both':
                expected = Phase.THREE_PHASE
                reason = "BOTH systems are always 3-Phase"
            else:
                expected = heuristic_phase(row.system_size, row.inverter_size)
                reason = "size heuristic disagrees"
            if row.phase != expected:
                findings.append({
                    "table": table,
                    "system_size": row.system_size,
                    "inverter_size": row.inverter_size,
                    "panel_brand": row.panel_brand,
                    "recorded_phase": row.phase.value,
                    "expected_phase": expected.value,
                    "reason": reason,
                })
    return findings
