"""
Phase classification: catalog first, size heuristic as fallback.
"""
import pytest
import sys
import os

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from solar_pricing.engine.catalog import PricingCatalog, default_catalog
from solar_pricing.engine.models import BothSystemPrice, Phase, SystemPrice
from solar_pricing.engine.phase import audit_phase_rules, determine_phase, heuristic_phase


@pytest.fixture(scope="module")
def catalog():
    return default_catalog()


@pytest.mark.parametrize("system_size,inverter_size,expected", [
    ("7kW", "8kW", Phase.THREE_PHASE),
    ("4kW", "4kW", Phase.ONE_PHASE),
    ("3kW", "5kW", Phase.THREE_PHASE),
    ("10kW", "10kW", Phase.THREE_PHASE),
    ("2kW", "2kW", Phase.ONE_PHASE),
    ("6kW", "5kW", Phase.ONE_PHASE),
    ("junk", "5kW", Phase.ONE_PHASE),
])
def test_heuristic_without_catalog(system_size, inverter_size, expected):
    assert determine_phase(system_size, inverter_size) == expected
    assert heuristic_phase(system_size, inverter_size) == expected


def test_catalog_row_is_authoritative():
    catalog = PricingCatalog(dcr=[SystemPrice("4kW", Phase.THREE_PHASE, "4kW", "Adani", 250000)])
    assert heuristic_phase("4kW", "4kW") == Phase.ONE_PHASE
    assert determine_phase("4kW", "4kW", catalog) == Phase.THREE_PHASE


def test_dcr_checked_before_non_dcr():
    catalog = PricingCatalog(
        dcr=[SystemPrice("4kW", Phase.ONE_PHASE, "4kW", "Adani", 1)],
        non_dcr=[SystemPrice("4kW", Phase.THREE_PHASE, "4kW", "Adani", 1)],
    )
    assert determine_phase("4kW", "4kW", catalog) == Phase.ONE_PHASE


def test_non_dcr_row_used_when_no_dcr_row():
    catalog = PricingCatalog(non_dcr=[SystemPrice("4kW", Phase.THREE_PHASE, "4kW", "Tata", 1)])
    assert determine_phase("4kW", "4kW", catalog) == Phase.THREE_PHASE


def test_both_rows_are_always_three_phase():
    catalog = PricingCatalog(
        both=[BothSystemPrice("4kW", Phase.ONE_PHASE, "4kW", "2kW", "2kW", "Adani", 1)])
    assert determine_phase("4kW", "4kW", catalog) == Phase.THREE_PHASE


def test_default_catalog_lookups(catalog):
    assert determine_phase("4kW", "4kW", catalog) == Phase.ONE_PHASE
    assert determine_phase("3kW", "5kW", catalog) == Phase.THREE_PHASE
    assert determine_phase("7kW", "8kW", catalog) == Phase.THREE_PHASE
    # First 5kW/5kW row in the DCR table is single phase
    assert determine_phase("5kW", "5kW", catalog) == Phase.ONE_PHASE


def test_size_labels_compare_numerically(catalog):
    assert determine_phase("3.0kW", "5 kW", catalog) == Phase.THREE_PHASE


def test_untabulated_sizes_use_heuristic(catalog):
    assert determine_phase("9kW", "9kW", catalog) == Phase.THREE_PHASE
    assert determine_phase("2kW", "2kW", catalog) == Phase.ONE_PHASE


def test_audit_flags_contradicting_rows(catalog):
    findings = audit_phase_rules(catalog)
    flagged = {(f['table'], f['system_size'], f['inverter_size']) for f in findings}

    # 3-Phase rows whose inverter matches a 3-6 kW system contradict the heuristic
    assert ('dcr', '5kW', '5kW') in flagged
    assert ('dcr', '6kW', '6kW') in flagged
    assert ('non_dcr', '6kW', '6kW') in flagged

    # Rows that agree are not flagged
    assert ('dcr', '3kW', '5kW') not in flagged
    assert ('dcr', '7kW', '8kW') not in flagged
    assert all(f['recorded_phase'] == '3-Phase' for f in findings)


def test_audit_does_not_change_resolution(catalog):
    audit_phase_rules(catalog)
    assert heuristic_phase("5kW", "5kW") == Phase.ONE_PHASE


def test_audit_flags_single_phase_both_rows():
    catalog = PricingCatalog(
        both=[BothSystemPrice("5kW", Phase.ONE_PHASE, "5kW", "3kW", "2kW", "Adani", 1)])
    findings = audit_phase_rules(catalog)
    assert len(findings) == 1
    assert findings[0]['table'] == 'both'
    assert findings[0]['expected_phase'] == '3-Phase'


def test_phase_is_repeatable(catalog):
    for system_size, inverter_size in [("5kW", "5kW"), ("9kW", "9kW"), ("4kW", "6kW"), ("bad", "")]:
        first = determine_phase(system_size, inverter_size, catalog)
        assert determine_phase(system_size, inverter_size, catalog) == first
        assert determine_phase(system_size, inverter_size, catalog) == first
