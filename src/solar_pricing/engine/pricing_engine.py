"""
Pricing Engine - binds one catalog and prices complete product selections with
traceability.

Every quote carries:
- A bill-of-materials line per component with its own trace
- Warnings for every fallback taken (scaled or default prices, missing parts)
- The tabulated package price for the same system, when there is one
"""
import logging
from pathlib import Path
from typing import Optional, Union

from . import component_pricing as components
from .catalog import PricingCatalog, resolve_catalog
from .configuration import (
    both_product_selection,
    config_to_product_selection,
    get_system_configuration,
)
from .models import Circuit, PanelGroup, Phase, ProductSelection, QuoteLine, QuoteResult, SystemType
from .phase import determine_phase
from .sizes import ZERO_SYSTEM_SIZE, calculate_system_size, format_kw, parse_kw, parse_watts
from .system_pricing import get_both_price, get_dcr_price, get_non_dcr_price

logger = logging.getLogger(__name__)

SOURCE_CATALOG = "Catalog"
SOURCE_SCALED = "Scaled"
SOURCE_DEFAULT = "Default"


def _money(value: float) -> str:
    return f"₹{value:,.2f}"


def _has_base_row(rows, target, size_of) -> bool:
    """Whether a sized price was scaled from another row rather than a reference price."""
    return target is not None and components.pick_base_row(rows, target, size_of) is not None


class PricingEngine:
    """
    Facade over the resolvers for one catalog.

    Quote resolution order:
    1. System size from the panel groups
    2. Phase from the board selection, the catalog's package rows, or the size heuristic
    3. One line per component; blank components are skipped
    4. Subsidies (central + state) subtracted from the subtotal
    5. Package price looked up for the same system
    """

    def __init__(self, catalog: Optional[PricingCatalog] = None):
        self.catalog = resolve_catalog(catalog)

    @classmethod
    def from_source(cls, source: Optional[Union[str, Path]]) -> 'PricingEngine':
        """Engine over a catalog directory, workbook or JSON file; None means the defaults."""
        from ..data.catalog_loader import load_catalog

        return cls(load_catalog(source))

    # ------------------------------------------------------------------
    # Single resolutions
    # ------------------------------------------------------------------

    def system_size(self, panel_size, quantity) -> str:
        return calculate_system_size(panel_size, quantity)

    def phase(self, system_size, inverter_size) -> Phase:
        return determine_phase(system_size, inverter_size, self.catalog)

    def configure(self, system_type, system_size, panel_brand, panel_quantity: Optional[int] = None,
                  dcr_capacity=None, non_dcr_capacity=None) -> Optional[ProductSelection]:
        """
        Product selection from the best matching preset.

        BOTH presets are split into DCR and NON DCR panel groups when both
        capacities are given.
        """
        preset = get_system_configuration(system_type, system_size, panel_brand, self.catalog)
        if preset is None:
            return None
        if preset.system_type == SystemType.BOTH and dcr_capacity is not None and non_dcr_capacity is not None:
            return both_product_selection(preset, dcr_capacity, non_dcr_capacity)
        return config_to_product_selection(preset, panel_quantity)

    def package_price(self, system_type, system_size, phase, inverter_size, panel_brand,
                      dcr_capacity=None, non_dcr_capacity=None) -> Optional[float]:
        """Tabulated package price for the system type, or None."""
        system_type = SystemType.parse(system_type)
        if system_type == SystemType.DCR:
            return get_dcr_price(system_size, phase, inverter_size, panel_brand, self.catalog)
        if system_type == SystemType.NON_DCR:
            return get_non_dcr_price(system_size, phase, inverter_size, panel_brand, self.catalog)
        if system_type == SystemType.BOTH:
            return get_both_price(system_size, phase, inverter_size, dcr_capacity, non_dcr_capacity,
                                  panel_brand, self.catalog)
        return None

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def quote(self, selection: ProductSelection) -> QuoteResult:
        """
        Price a product selection component by component.

        Args:
            selection: The dealer's selection; it is not modified

        Returns:
            QuoteResult with lines, totals, trace and warnings
        """
        groups = selection.panel_groups()
        array_size = self._system_size(groups)
        system_size = selection.system_size or array_size

        result = QuoteResult(
            system_type=selection.system_type,
            system_size=system_size,
            phase=None,
            lines=[],
        )
        result.add_trace("Array Size", f"{len(groups)} panel group(s)", array_size)
        if system_size != array_size:
            result.add_trace("System Size", "Nominal size from selection", system_size)

        if array_size == ZERO_SYSTEM_SIZE:
            result.add_warning("No panels selected")

        phase = self._selected_phase(selection)
        if phase is not None:
            result.add_trace("Phase", "From distribution board selection", phase.value)
        elif selection.inverter_size and system_size != ZERO_SYSTEM_SIZE:
            phase = self.phase(system_size, selection.inverter_size)
            result.add_trace("Phase", f"{system_size} with {selection.inverter_size} inverter", phase.value)
        else:
            result.add_trace("Phase", "Not enough information to classify")
        if phase is not None:
            result.phase = phase.value

        for group in groups:
            self._add_line(result, self._panel_line(group))
        self._add_line(result, self._inverter_line(selection))
        self._add_line(result, self._structure_line(selection))
        self._add_line(result, self._meter_line(selection))
        self._add_line(result, self._cable_line(selection.ac_cable_brand, selection.ac_cable_size, Circuit.AC))
        self._add_line(result, self._cable_line(selection.dc_cable_brand, selection.dc_cable_size, Circuit.DC))
        self._add_line(result, self._board_line('acdb', selection.acdb, phase))
        self._add_line(result, self._board_line('dcdb', selection.dcdb, phase))

        result.subtotal = sum(line.extended_price for line in result.lines)
        result.subsidy = (selection.central_subsidy or 0) + (selection.state_subsidy or 0)
        result.net_total = result.subtotal - result.subsidy
        result.add_trace("Subtotal", f"{len(result.lines)} line(s)", _money(result.subtotal))
        if result.subsidy:
            result.add_trace("Subsidy", "Central + state", _money(result.subsidy))
        result.add_trace("Total", "Subtotal - subsidy", _money(result.net_total))

        if phase is not None:
            result.package_price = self._package_price(selection, groups, system_size, phase)
            if result.package_price is not None:
                result.add_trace("Package Price", "Tabulated package for this system",
                                 _money(result.package_price))
            else:
                result.add_trace("Package Price", "No tabulated package for this system")

        return result

    def _add_line(self, result: QuoteResult, line: Optional[QuoteLine]):
        if line is None:
            return
        result.lines.append(line)
        for warning in line.warnings:
            result.add_warning(warning)

    def _selected_phase(self, selection: ProductSelection) -> Optional[Phase]:
        """Phase named by the ACDB option, else the DCDB option ("Havells (3-Phase)")."""
        for option in (selection.acdb, selection.dcdb):
            parsed = components.parse_board_option(option)
            if parsed is not None:
                return parsed[1]
        return None

    def _system_size(self, groups: list[PanelGroup]) -> str:
        if len(groups) == 1:
            return calculate_system_size(groups[0].size, groups[0].quantity)
        total_kw = 0.0
        for group in groups:
            size = calculate_system_size(group.size, group.quantity)
            total_kw += parse_kw(size) or 0
        return format_kw(total_kw) if total_kw > 0 else ZERO_SYSTEM_SIZE

    def _package_price(self, selection: ProductSelection, groups: list[PanelGroup],
                       system_size: str, phase: Phase) -> Optional[float]:
        system_type = SystemType.parse(selection.system_type)
        if system_type != SystemType.BOTH:
            brand = selection.panel_brand or (groups[0].brand if groups else "")
            return self.package_price(system_type, system_size, phase, selection.inverter_size, brand)

        capacity = {SystemType.DCR.value: 0.0, SystemType.NON_DCR.value: 0.0}
        for group in groups:
            if group.type in capacity:
                capacity[group.type] += parse_kw(calculate_system_size(group.size, group.quantity)) or 0
        dcr_capacity = selection.dcr_capacity or format_kw(capacity[SystemType.DCR.value])
        non_dcr_capacity = selection.non_dcr_capacity or format_kw(capacity[SystemType.NON_DCR.value])
        brand = selection.dcr_panel_brand or selection.panel_brand
        return self.package_price(system_type, system_size, phase, selection.inverter_size, brand,
                                  dcr_capacity, non_dcr_capacity)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def _sized_line(self, component: str, brand: str, size: str, quantity: int, unit_price: float,
                    exact: bool, scaled: bool) -> QuoteLine:
        line = QuoteLine(
            component=component,
            description=f"{brand} {size}".strip(),
            quantity=quantity,
            unit_price=unit_price,
            extended_price=0.0,
            source="",
        )
        if exact:
            line.source = SOURCE_CATALOG
            line.add_trace("Price Resolution", f"Catalog price for {brand} {size}", _money(unit_price))
        elif scaled:
            line.source = SOURCE_SCALED
            line.add_trace("Price Resolution", f"No {size} row for {brand}, scaled from another size",
                           _money(unit_price))
            line.add_warning(f"Scaled {component} price used for {brand} {size}")
        else:
            line.source = SOURCE_DEFAULT
            line.add_trace("Price Resolution", f"{brand} not in catalog, using reference price",
                           _money(unit_price))
            line.add_warning(f"Reference {component} price used for {brand} {size}")
        line.extended_price = line.unit_price * quantity
        line.add_trace("Extension", f"Quantity {quantity} × {_money(line.unit_price)}",
                       _money(line.extended_price))
        return line

    def _panel_line(self, group: PanelGroup) -> Optional[QuoteLine]:
        if not group.brand or not group.size or not group.quantity:
            return None
        watts = parse_watts(group.size)
        unit_price = components.get_panel_price(group.brand, group.size, self.catalog)
        line = self._sized_line(
            "panel", group.brand, group.size, group.quantity, unit_price,
            exact=watts is not None and self.catalog.find_panel(group.brand, watts) is not None,
            scaled=_has_base_row(self.catalog.panels_for_brand(group.brand), watts, lambda r: r.watts),
        )
        if group.type in (SystemType.DCR.value, SystemType.NON_DCR.value):
            line.description = f"{line.description} ({SystemType(group.type).label})"
        if watts is None:
            line.add_warning(f"Invalid panel size {group.size!r}")
        return line

    def _inverter_line(self, selection: ProductSelection) -> Optional[QuoteLine]:
        brand, size = selection.inverter_brand, selection.inverter_size
        if not brand or not size:
            return None
        kw = parse_kw(size)
        unit_price = components.get_inverter_price(brand, size, self.catalog)
        line = self._sized_line(
            "inverter", brand, size, 1, unit_price,
            exact=kw is not None and self.catalog.find_inverter(brand, kw) is not None,
            scaled=_has_base_row(self.catalog.inverters_for_brand(brand), kw, lambda r: r.kw),
        )
        if selection.inverter_type:
            line.description = f"{line.description} {selection.inverter_type}"
        return line

    def _structure_line(self, selection: ProductSelection) -> Optional[QuoteLine]:
        structure_type, size = selection.structure_type, selection.structure_size
        if not structure_type or not size:
            return None
        kw = parse_kw(size)
        unit_price = components.get_structure_price(structure_type, size, self.catalog)
        return self._sized_line(
            "structure", structure_type, size, 1, unit_price,
            exact=kw is not None and self.catalog.find_structure(structure_type, kw) is not None,
            scaled=_has_base_row(self.catalog.structures_for_type(structure_type), kw, lambda r: r.kw),
        )

    def _flat_line(self, component: str, description: str, unit_price: float, found: bool) -> QuoteLine:
        line = QuoteLine(
            component=component,
            description=description,
            quantity=1,
            unit_price=unit_price,
            extended_price=unit_price,
            source=SOURCE_CATALOG if found else SOURCE_DEFAULT,
        )
        if found:
            line.add_trace("Price Resolution", f"Catalog price for {description}", _money(unit_price))
        else:
            line.add_trace("Price Resolution", f"{description} not in catalog, using default",
                           _money(unit_price))
            line.add_warning(f"Default {component} price used for {description}")
        return line

    def _meter_line(self, selection: ProductSelection) -> Optional[QuoteLine]:
        brand = selection.meter_brand
        if not brand:
            return None
        return self._flat_line(
            "meter", brand,
            components.get_meter_price(brand, self.catalog),
            found=self.catalog.find_meter(brand) is not None,
        )

    def _cable_line(self, brand: str, size: str, circuit: Circuit) -> Optional[QuoteLine]:
        if not brand:
            return None
        unit_price = components.get_cable_price(brand, size, circuit, self.catalog)
        description = " ".join(part for part in (brand, size, circuit.value) if part)
        line = self._flat_line(
            f"{circuit.value.lower()}_cable", description, unit_price,
            found=self.catalog.find_cable_for_brand(brand, circuit) is not None,
        )
        if line.source == SOURCE_CATALOG and self.catalog.find_cable(brand, size, circuit) is None:
            line.add_trace("Substitution", f"No {size or 'sized'} {circuit.value} row for {brand}",
                           "first listed size")
            line.add_warning(f"{brand} {circuit.value} cable priced at another size")
        return line

    def _board_line(self, table: str, option: str, phase: Optional[Phase]) -> Optional[QuoteLine]:
        if not option:
            return None
        parsed = components.parse_board_option(option)
        if parsed is not None:
            brand, board_phase = parsed
            if phase is not None and board_phase != phase:
                mismatch = f"{table.upper()} {option} does not match {phase.value} system"
            else:
                mismatch = None
        else:
            brand, board_phase, mismatch = option.strip(), phase, None

        if board_phase is None:
            line = self._flat_line(table, option, components.BOARD_DEFAULT_PRICE, found=False)
            line.add_warning(f"Phase unknown for {table.upper()} {option}")
            return line

        price = components.get_acdb_price if table == 'acdb' else components.get_dcdb_price
        line = self._flat_line(
            table, components.format_board_option(brand, board_phase),
            price(brand, board_phase, self.catalog),
            found=self.catalog.find_board(table, brand, board_phase) is not None,
        )
        if mismatch:
            line.add_warning(mismatch)
        return line
