"""
Print a traced quote for one system.

Usage:
    python scripts/debug_resolution.py dcr 5kW Adani [inverter size]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from solar_pricing.config.settings import get_settings
from solar_pricing.engine import PricingEngine


def debug(system_type: str, system_size: str, panel_brand: str, inverter_size: str = None):
    engine = PricingEngine.from_source(get_settings().catalog_source)

    print(f"--- Resolving {system_type} {system_size} {panel_brand} ---")
    selection = engine.configure(system_type, system_size, panel_brand)
    if selection is None:
        print(f"No {system_type} presets in catalog")
        return
    if inverter_size:
        selection.inverter_size = inverter_size

    print(f"Preset: {selection.panel_quantity} x {selection.panel_brand} {selection.panel_size}, "
          f"{selection.inverter_brand} {selection.inverter_size}")

    result = engine.quote(selection)
    print("\nQuote trace:")
    print(result.get_trace_text())

    print("\nLines:")
    for line in result.lines:
        print(f"  {line.component:<10} {line.description:<35} {line.quantity:>3} x {line.unit_price:>10.2f}"
              f" = {line.extended_price:>11.2f}  [{line.source}]")
        text = line.get_trace_text()
        if text:
            print("    " + text.replace("\n", "\n    "))

    if result.warnings:
        print("\nWarnings:")
        for warning in result.warnings:
            print(f"  - {warning}")


if __name__ == "__main__":
    args = sys.argv[1:]
    if len(args) < 3:
        print(__doc__)
        sys.exit(1)
    debug(*args[:4])
