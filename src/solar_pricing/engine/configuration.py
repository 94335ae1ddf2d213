"""
Configuration resolution - picks a default bill of materials for a system and
turns presets into editable product selections.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from .catalog import PricingCatalog, clean_label, resolve_catalog
from .models import ProductSelection, SystemConfigurationPreset, SystemType
from .sizes import parse_kw, parse_watts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemConfigOption:
    """A preset as offered in the configuration dropdown."""
    id: str
    label: str
    value: SystemConfigurationPreset


def get_system_configuration(system_type, system_size, panel_brand,
                             catalog: Optional[PricingCatalog] = None) -> Optional[SystemConfigurationPreset]:
    """
    Find the preset to start a quotation from.

    Tries, in order:
    1. Same type, size and panel brand
    2. Same type and size, any brand
    3. Any preset of the type

    Returns None only when the type has no presets at all.
    """
    system_type = SystemType.parse(system_type)
    if system_type is None:
        return None

    presets = [p for p in resolve_catalog(catalog).system_configs if p.system_type == system_type]
    if not presets:
        return None

    system_kw = parse_kw(system_size)
    brand = clean_label(panel_brand)

    same_size = [p for p in presets if system_kw is not None and p.system_kw == system_kw]
    for preset in same_size:
        if clean_label(preset.panel_brand) == brand:
            return preset

    if same_size:
        logger.debug("No %s %s preset for %r, using %s", system_type.label, system_size, brand,
                     same_size[0].panel_brand)
        return same_size[0]

    logger.debug("No %s preset for %s, using %s", system_type.label, system_size, presets[0].system_size)
    return presets[0]


def panel_quantity_for(capacity, panel_size) -> int:
    """Panels needed to reach `capacity` kW with `panel_size` panels; 0 if either is unusable."""
    kw = parse_kw(capacity)
    watts = parse_watts(panel_size)
    if kw is None or watts is None or kw <= 0 or watts <= 0:
        return 0
    # Round first so 5.45 kW of 545W panels is 10, not 11
    return math.ceil(round(kw * 1000 / watts, 9))


def config_to_product_selection(preset: SystemConfigurationPreset,
                                explicit_quantity: Optional[int] = None) -> ProductSelection:
    """
    Fill a product selection from a preset.

    Panel quantity is derived from the preset's system size and panel wattage
    unless a non-zero `explicit_quantity` is given.
    """
    quantity = explicit_quantity or panel_quantity_for(preset.system_size, preset.panel_size)

    return ProductSelection(
        system_type=preset.system_type.value,
        system_size=preset.system_size,
        panel_brand=preset.panel_brand,
        panel_size=preset.panel_size,
        panel_quantity=quantity,
        inverter_type=preset.inverter_type,
        inverter_brand=preset.inverter_brand,
        inverter_size=preset.inverter_size,
        structure_type=preset.structure_type,
        structure_size=preset.structure_size,
        meter_brand=preset.meter_brand,
        ac_cable_brand=preset.ac_cable_brand,
        ac_cable_size=preset.ac_cable_size,
        dc_cable_brand=preset.dc_cable_brand,
        dc_cable_size=preset.dc_cable_size,
        acdb=preset.acdb,
        dcdb=preset.dcdb,
        central_subsidy=preset.central_subsidy,
        state_subsidy=preset.state_subsidy,
    )


def resolve_both_configuration(dcr_capacity, non_dcr_capacity,
                               preset: SystemConfigurationPreset) -> tuple[ProductSelection, ProductSelection]:
    """
    Split a BOTH preset into its DCR and NON DCR panel groups.

    Each fragment carries the preset's panel and is sized from its own
    capacity; the rest of the bill of materials is shared.
    """
    dcr_quantity = panel_quantity_for(dcr_capacity, preset.panel_size)
    non_dcr_quantity = panel_quantity_for(non_dcr_capacity, preset.panel_size)

    dcr = config_to_product_selection(preset)
    dcr.system_type = SystemType.DCR.value
    dcr.system_size = dcr_capacity
    dcr.dcr_capacity = dcr_capacity
    dcr.panel_quantity = dcr_quantity
    dcr.dcr_panel_brand = preset.panel_brand
    dcr.dcr_panel_size = preset.panel_size
    dcr.dcr_panel_quantity = dcr_quantity

    non_dcr = config_to_product_selection(preset)
    non_dcr.system_type = SystemType.NON_DCR.value
    non_dcr.system_size = non_dcr_capacity
    non_dcr.non_dcr_capacity = non_dcr_capacity
    non_dcr.panel_quantity = non_dcr_quantity
    non_dcr.non_dcr_panel_brand = preset.panel_brand
    non_dcr.non_dcr_panel_size = preset.panel_size
    non_dcr.non_dcr_panel_quantity = non_dcr_quantity

    return dcr, non_dcr


def both_product_selection(preset: SystemConfigurationPreset, dcr_capacity,
                           non_dcr_capacity) -> ProductSelection:
    """One BOTH selection with both panel groups filled in."""
    dcr, non_dcr = resolve_both_configuration(dcr_capacity, non_dcr_capacity, preset)
    return replace(
        config_to_product_selection(preset),
        system_type=SystemType.BOTH.value,
        panel_quantity=dcr.dcr_panel_quantity + non_dcr.non_dcr_panel_quantity,
        dcr_capacity=dcr_capacity,
        non_dcr_capacity=non_dcr_capacity,
        dcr_panel_brand=dcr.dcr_panel_brand,
        dcr_panel_size=dcr.dcr_panel_size,
        dcr_panel_quantity=dcr.dcr_panel_quantity,
        non_dcr_panel_brand=non_dcr.non_dcr_panel_brand,
        non_dcr_panel_size=non_dcr.non_dcr_panel_size,
        non_dcr_panel_quantity=non_dcr.non_dcr_panel_quantity,
    )


# ============================================================================
# Dropdown options
# ============================================================================

def _option(preset: SystemConfigurationPreset, index: int) -> SystemConfigOption:
    label = (f"{preset.system_type.label} - {preset.system_size} - {preset.panel_brand} "
             f"({preset.panel_size}, {preset.inverter_brand} {preset.inverter_size})")
    return SystemConfigOption(
        id=f"config-{preset.system_type.value}-{preset.system_size}-{preset.panel_brand}-{index}",
        label=label,
        value=preset,
    )


def get_system_config_options(catalog: Optional[PricingCatalog] = None) -> list[SystemConfigOption]:
    """Every preset as a dropdown option, in catalog order."""
    return [_option(p, i) for i, p in enumerate(resolve_catalog(catalog).system_configs)]


def get_system_config_options_by_type(system_type,
                                      catalog: Optional[PricingCatalog] = None) -> list[SystemConfigOption]:
    system_type = SystemType.parse(system_type)
    return [o for o in get_system_config_options(catalog) if o.value.system_type == system_type]


def get_system_config_options_by_brand(panel_brand: str,
                                       catalog: Optional[PricingCatalog] = None) -> list[SystemConfigOption]:
    brand = clean_label(panel_brand)
    return [o for o in get_system_config_options(catalog) if clean_label(o.value.panel_brand) == brand]


def get_system_config_by_id(config_id: str,
                            catalog: Optional[PricingCatalog] = None) -> Optional[SystemConfigurationPreset]:
    for option in get_system_config_options(catalog):
        if option.id == config_id:
            return option.value
    return None
