"""
Component price resolution: exact rows, scaled rows and reference prices.
"""
import math
import pytest
import sys
import os

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from solar_pricing.engine.catalog import PricingCatalog, default_catalog
from solar_pricing.engine.component_pricing import (
    available_panel_sizes,
    available_structure_sizes,
    format_board_option,
    get_acdb_options,
    get_acdb_price,
    get_cable_price,
    get_dcdb_options,
    get_dcdb_price,
    get_inverter_price,
    get_meter_price,
    get_panel_price,
    get_structure_price,
    parse_board_option,
)
from solar_pricing.engine.models import Circuit, MeterPrice, PanelPrice, Phase


@pytest.fixture(scope="module")
def catalog():
    return default_catalog()


# ============================================================================
# Panels
# ============================================================================

def test_panel_exact_row(catalog):
    assert get_panel_price("Adani", "545W", catalog) == 31000


def test_panel_double_size_is_double_price(catalog):
    assert get_panel_price("Adani", "1090W", catalog) == 2 * get_panel_price("Adani", "545W", catalog)


def test_panel_scales_from_nearest_size(catalog):
    # 547W divides no Adani size evenly; nearest is 545W
    assert get_panel_price("Adani", "547W", catalog) == pytest.approx(31000 * 547 / 545)


def test_panel_default_catalog_used_when_none_given():
    assert get_panel_price("Adani", "545W") == 31000


def test_panel_unknown_brand_uses_reference_price(catalog):
    assert get_panel_price("NoSuchBrand", "440W", catalog) == pytest.approx(24000)
    assert get_panel_price("NoSuchBrand", "880W", catalog) == pytest.approx(48000)


def test_panel_reference_brand_without_rows():
    empty = PricingCatalog()
    assert get_panel_price("Adani", "440W", empty) == pytest.approx(25000)
    assert get_panel_price("Tata", "220W", empty) == pytest.approx(13000)
    assert get_panel_price("Vikram Solar", "880W", empty) == pytest.approx(49000)


@pytest.mark.parametrize("brand,size", [
    ("Adani", ""),
    ("Adani", None),
    ("", "545W"),
    ("Adani", "big"),
    ("Adani", "0W"),
])
def test_panel_invalid_input_is_zero(catalog, brand, size):
    assert get_panel_price(brand, size, catalog) == 0


def test_panel_zero_price_row_is_a_real_price():
    catalog = PricingCatalog(panels=[PanelPrice("Promo", "400W", 0), PanelPrice("Promo", "500W", 20000)])
    assert get_panel_price("Promo", "400W", catalog) == 0


def test_panel_prices_are_finite_and_non_negative(catalog):
    for brand in ("Adani", "Tata", "Waaree", "Unknown"):
        for size in ("1W", "99W", "545W", "2000W"):
            price = get_panel_price(brand, size, catalog)
            assert math.isfinite(price) and price >= 0, f"{brand} {size} -> {price}"


# ============================================================================
# Inverters and structures
# ============================================================================

def test_inverter_exact_and_scaled(catalog):
    assert get_inverter_price("Growatt", "5kW", catalog) == 58000
    # 10kW is tabulated; 20kW is a whole multiple of it
    assert get_inverter_price("Growatt", "20kW", catalog) == pytest.approx(2 * 117000)
    # 15kW is a multiple of 5kW and 3kW; the larger size wins
    assert get_inverter_price("Solis", "15kW", catalog) == pytest.approx(3 * 53000)


def test_inverter_reference_price(catalog):
    assert get_inverter_price("XWatt", "3kW", catalog) == pytest.approx(35000)
    assert get_inverter_price("XWatt", "6kW", catalog) == pytest.approx(70000)
    assert get_inverter_price("Growatt", "", catalog) == 0


def test_structure_exact_scaled_and_fallback(catalog):
    assert get_structure_price("GI Structure", "5kW", catalog) == 40000
    assert get_structure_price("GI Structure", "7kW", catalog) == pytest.approx(7 * 8000)
    assert get_structure_price("Aluminum Structure", "6kW", catalog) == pytest.approx(60000)
    assert get_structure_price("Bamboo Structure", "4kW", catalog) == pytest.approx(32000)
    assert get_structure_price("GI Structure", "none", catalog) == 0


# ============================================================================
# Flat-priced components
# ============================================================================

def test_meter(catalog):
    assert get_meter_price("HPL", catalog) == 4800
    assert get_meter_price("Unknown", catalog) == 5000


def test_cable_exact_then_brand_then_default(catalog):
    assert get_cable_price("Polycab", "6 sq mm", "AC", catalog) == 3500
    assert get_cable_price("Polycab", "6 sq mm", Circuit.DC, catalog) == 3500
    # No 10 sq mm Polycab row: first Polycab AC row
    assert get_cable_price("Polycab", "10 sq mm", "AC", catalog) == 3000
    # KEI only makes DC cable
    assert get_cable_price("KEI", "4 sq mm", "AC", catalog) == 3000
    assert get_cable_price("KEI", "6 sq mm", "dc", catalog) == 3600
    assert get_cable_price("Unknown", "4 sq mm", "DC", catalog) == 3000


def test_cable_unknown_circuit_is_default(catalog):
    assert get_cable_price("Polycab", "6 sq mm", "XX", catalog) == 3000


def test_distribution_boards(catalog):
    assert get_acdb_price("L&T", "3-Phase", catalog) == 5500
    assert get_dcdb_price("Polycab", Phase.ONE_PHASE, catalog) == 2300
    assert get_acdb_price("Unknown", "1-Phase", catalog) == 2500
    assert get_dcdb_price("Havells", "bogus", catalog) == 2500


def test_board_options_filtered_by_phase(catalog):
    options = get_acdb_options("1-Phase", catalog)
    assert [o.brand for o in options] == ["Havells", "L&T", "Polycab", "HPL"]
    assert all(o.phase == Phase.ONE_PHASE for o in options)
    assert len(get_dcdb_options(Phase.THREE_PHASE, catalog)) == 4


def test_board_option_strings():
    assert format_board_option("Havells", Phase.ONE_PHASE) == "Havells (1-Phase)"
    assert parse_board_option("Havells (1-Phase)") == ("Havells", Phase.ONE_PHASE)
    assert parse_board_option("L&T (3-Phase)") == ("L&T", Phase.THREE_PHASE)
    assert parse_board_option("Havells") is None
    assert parse_board_option("Havells (2-Phase)") is None
    assert parse_board_option("") is None


def test_available_sizes(catalog):
    panel_sizes = available_panel_sizes(catalog)
    assert panel_sizes[0] == "320W"
    assert "545W" in panel_sizes
    assert len(panel_sizes) == len(set(panel_sizes))
    assert available_structure_sizes(catalog) == ["1kW", "3kW", "5kW", "10kW"]


def test_resolution_is_repeatable(catalog):
    first = [get_panel_price("Adani", "547W", catalog), get_inverter_price("Solis", "7kW", catalog)]
    second = [get_panel_price("Adani", "547W", catalog), get_inverter_price("Solis", "7kW", catalog)]
    assert first == second


HUGE_WATTS = "1" + "0" * 307 + "W"
HUGE_KW = "1" + "0" * 307 + "kW"


@pytest.mark.parametrize("resolve", [
    lambda c: get_panel_price("Adani", HUGE_WATTS, c),
    lambda c: get_panel_price("NoSuchBrand", HUGE_WATTS, c),
    lambda c: get_inverter_price("Growatt", HUGE_KW, c),
    lambda c: get_inverter_price("XWatt", HUGE_KW, c),
    lambda c: get_structure_price("GI Structure", HUGE_KW, c),
    lambda c: get_structure_price("Bamboo Structure", HUGE_KW, c),
])
def test_oversized_labels_stay_finite(catalog, resolve):
    price = resolve(catalog)
    assert math.isfinite(price) and price >= 0


def test_numeric_brand_is_accepted(catalog):
    assert get_meter_price(123, catalog) == 5000
    assert get_panel_price(123, "440W", catalog) == pytest.approx(24000)
    assert get_inverter_price(123, "3kW", catalog) == pytest.approx(35000)
    assert get_cable_price(123, "4 sq mm", "AC", catalog) == 3000
    assert get_acdb_price(123, "1-Phase", catalog) == 2500
    assert get_dcdb_price(123, "3-Phase", catalog) == 2500


def test_numeric_brand_matches_its_label():
    numbered = PricingCatalog(meters=(MeterPrice("123", 4100),))
    assert get_meter_price(123, numbered) == 4100
