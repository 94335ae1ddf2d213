"""
Configuration presets: fallback cascade, preset to selection, BOTH split and
dropdown options.
"""
import pytest
import sys
import os

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from solar_pricing.engine.catalog import PricingCatalog, default_catalog
from solar_pricing.engine.configuration import (
    both_product_selection,
    config_to_product_selection,
    get_system_config_by_id,
    get_system_config_options,
    get_system_config_options_by_brand,
    get_system_config_options_by_type,
    get_system_configuration,
    panel_quantity_for,
    resolve_both_configuration,
)
from solar_pricing.engine.models import SystemConfigurationPreset, SystemType


@pytest.fixture(scope="module")
def catalog():
    return default_catalog()


def make_preset(**overrides) -> SystemConfigurationPreset:
    fields = dict(
        system_type=SystemType.DCR, system_size="5kW", panel_brand="Adani", panel_size="545W",
        inverter_brand="XWatt", inverter_size="5kW", inverter_type="String Inverter",
        structure_type="GI Structure", structure_size="5kW", meter_brand="L&T",
        ac_cable_brand="Polycab", ac_cable_size="4 sq mm", dc_cable_brand="Polycab",
        dc_cable_size="4 sq mm", acdb="Havells (1-Phase)", dcdb="Havells (1-Phase)",
        central_subsidy=78000,
    )
    fields.update(overrides)
    return SystemConfigurationPreset(**fields)


# ============================================================================
# Cascade
# ============================================================================

def test_exact_match(catalog):
    preset = get_system_configuration("dcr", "7kW", "Tata", catalog)
    assert preset.panel_brand == "Tata"
    assert preset.system_size == "7kW"
    assert preset.inverter_brand == "GoodWe"


def test_unknown_brand_falls_back_to_type_and_size(catalog):
    preset = get_system_configuration("dcr", "7kW", "NoSuchBrand", catalog)
    assert preset is not None
    assert preset.system_type == SystemType.DCR
    assert preset.system_size == "7kW"


def test_unknown_size_falls_back_to_type(catalog):
    preset = get_system_configuration("non-dcr", "99kW", "Adani", catalog)
    assert preset is not None
    assert preset.system_type == SystemType.NON_DCR


@pytest.mark.parametrize("system_type", ["dcr", "non-dcr", "both", SystemType.BOTH])
def test_every_type_resolves(catalog, system_type):
    preset = get_system_configuration(system_type, "1kW", "", catalog)
    assert preset is not None
    assert preset.system_type == SystemType.parse(system_type)


def test_unknown_type_is_none(catalog):
    assert get_system_configuration("hybrid", "5kW", "Adani", catalog) is None


def test_type_without_presets_is_none():
    catalog = PricingCatalog(system_configs=[make_preset()])
    assert get_system_configuration("both", "5kW", "Adani", catalog) is None


def test_size_matches_numerically(catalog):
    preset = get_system_configuration("both", "10.0 kW", "Waaree", catalog)
    assert preset.system_size == "10kW"
    assert preset.panel_brand == "Waaree"


# ============================================================================
# Preset -> selection
# ============================================================================

def test_quantity_derived_from_preset():
    selection = config_to_product_selection(make_preset())
    assert selection.panel_quantity == 10  # ceil(5000 / 545)


def test_explicit_quantity_wins():
    assert config_to_product_selection(make_preset(), 12).panel_quantity == 12
    assert config_to_product_selection(make_preset(), 0).panel_quantity == 10


def test_exact_multiple_does_not_round_up():
    assert panel_quantity_for("5.45kW", "545W") == 10
    assert panel_quantity_for("3kW", "500W") == 6
    assert panel_quantity_for("3kW", "") == 0
    assert panel_quantity_for("abc", "545W") == 0


def test_unparseable_preset_sizes_give_zero_quantity():
    selection = config_to_product_selection(make_preset(panel_size="big"))
    assert selection.panel_quantity == 0


def test_fields_copied_through():
    selection = config_to_product_selection(make_preset(state_subsidy=10000))
    assert selection.system_type == "dcr"
    assert selection.system_size == "5kW"
    assert selection.inverter_brand == "XWatt"
    assert selection.inverter_type == "String Inverter"
    assert selection.structure_size == "5kW"
    assert selection.dc_cable_size == "4 sq mm"
    assert selection.acdb == "Havells (1-Phase)"
    assert selection.central_subsidy == 78000
    assert selection.state_subsidy == 10000


def test_selections_are_fresh_objects():
    preset = make_preset()
    first = config_to_product_selection(preset)
    first.panel_quantity = 99
    assert config_to_product_selection(preset).panel_quantity == 10


# ============================================================================
# BOTH systems
# ============================================================================

def test_resolve_both_configuration_sizes_each_group():
    preset = make_preset(system_type=SystemType.BOTH, acdb="Havells (3-Phase)")
    dcr, non_dcr = resolve_both_configuration("3kW", "2kW", preset)

    assert dcr.system_type == "dcr"
    assert dcr.dcr_panel_quantity == 6  # ceil(3000 / 545)
    assert dcr.dcr_panel_brand == "Adani"
    assert dcr.non_dcr_panel_quantity is None

    assert non_dcr.system_type == "non-dcr"
    assert non_dcr.non_dcr_panel_quantity == 4  # ceil(2000 / 545)
    assert non_dcr.non_dcr_panel_size == "545W"
    assert non_dcr.dcr_panel_quantity is None

    assert dcr.inverter_size == non_dcr.inverter_size == "5kW"


def test_both_product_selection_merges_groups():
    preset = make_preset(system_type=SystemType.BOTH)
    selection = both_product_selection(preset, "3kW", "2kW")

    assert selection.system_type == "both"
    assert selection.system_size == "5kW"
    assert selection.panel_quantity == 10
    assert selection.dcr_capacity == "3kW"
    assert selection.non_dcr_capacity == "2kW"
    groups = selection.panel_groups()
    assert [(g.type, g.quantity) for g in groups] == [("dcr", 6), ("non-dcr", 4)]


def test_both_with_zero_non_dcr_capacity():
    selection = both_product_selection(make_preset(system_type=SystemType.BOTH), "5kW", "0kW")
    assert selection.dcr_panel_quantity == 10
    assert selection.non_dcr_panel_quantity == 0
    assert [g.type for g in selection.panel_groups()] == ["dcr"]


# ============================================================================
# Dropdown options
# ============================================================================

def test_options_cover_every_preset(catalog):
    options = get_system_config_options(catalog)
    assert len(options) == len(catalog.system_configs)
    assert len({o.id for o in options}) == len(options)


def test_option_id_and_label(catalog):
    first = get_system_config_options(catalog)[0]
    assert first.id == "config-dcr-3kW-Adani-0"
    assert first.label == "DCR - 3kW - Adani (545W, XWatt 3kW)"
    assert first.value is catalog.system_configs[0]


def test_options_by_type_and_brand(catalog):
    both = get_system_config_options_by_type("both", catalog)
    assert both and all(o.value.system_type == SystemType.BOTH for o in both)
    assert both[0].label.startswith("BOTH - ")

    non_dcr = get_system_config_options_by_type("non-dcr", catalog)
    assert non_dcr[0].label.startswith("NON DCR - ")

    tata = get_system_config_options_by_brand("Tata", catalog)
    assert tata and all(o.value.panel_brand == "Tata" for o in tata)


def test_config_by_id(catalog):
    option = get_system_config_options_by_type("both", catalog)[0]
    assert get_system_config_by_id(option.id, catalog) is option.value
    assert get_system_config_by_id("config-dcr-3kW-Adani-999", catalog) is None


def test_numeric_brand_falls_back_to_type_and_size(catalog):
    preset = get_system_configuration("dcr", "3kW", 123, catalog)
    assert preset.system_size == "3kW"
    assert preset.panel_brand == "Adani"
    assert get_system_config_options_by_brand(123, catalog) == []


def test_configuration_is_repeatable(catalog):
    first = get_system_configuration("both", "10kW", "Waaree", catalog)
    assert get_system_configuration("both", "10kW", "Waaree", catalog) is first
    assert get_system_configuration("non-dcr", "99kW", "Tata", catalog) is \
        get_system_configuration("non-dcr", "99kW", "Tata", catalog)
