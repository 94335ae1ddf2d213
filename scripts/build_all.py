#!/usr/bin/env python
"""
Build pipeline - validates the pricing catalog and runs the golden cases.

Usage:
    python scripts/build_all.py [catalog source]
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from solar_pricing.data.build_catalog import build_catalog_report


def main():
    source = sys.argv[1] if len(sys.argv) > 1 else None

    print("=" * 60)
    print("SOLAR PRICING BUILD PIPELINE")
    print("=" * 60)
    print()

    print("[1/2] Validating pricing catalog...")
    report = build_catalog_report(source, verbose=True)

    if report["status"] != "success":
        print("\n❌ BUILD FAILED")
        for error in report["errors"]:
            print(f"  {error}")
        sys.exit(1)

    print()
    print("[2/2] Running golden tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/test_golden_cases.py', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    for table, count in report['metrics']['table_sizes'].items():
        print(f"  {table}: {count} rows")
    print(f"  Duplicate keys: {sum(report['metrics']['duplicate_keys'].values())}")
    print(f"  Phase rule conflicts: {report['metrics']['phase_rule_conflicts']}")
    for finding in report.get('phase_audit', []):
        print(f"    {finding['table']} {finding['system_size']} / {finding['inverter_size']} "
              f"{finding['panel_brand']}: {finding['recorded_phase']} (heuristic {finding['expected_phase']})")


if __name__ == "__main__":
    main()
