"""
Catalog Builder - Validates a pricing catalog source and writes a build report.

The report records:
- Input files with content hashes
- Row counts per table
- Duplicate keys (only the first row is ever used)
- Rows whose size labels do not parse
- Package rows whose phase contradicts the size heuristic
"""
import hashlib
import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..config.settings import Settings, get_settings
from ..engine.catalog import TABLE_NAMES, PricingCatalog
from ..engine.phase import audit_phase_rules
from .catalog_loader import CatalogLoadError, load_catalog

logger = logging.getLogger(__name__)

# Lookup key per table, as strings for the report
_TABLE_KEYS = {
    'panels': lambda r: (r.brand, r.watts),
    'inverters': lambda r: (r.brand, r.kw),
    'structures': lambda r: (r.type, r.kw),
    'meters': lambda r: (r.brand,),
    'cables': lambda r: (r.brand, r.size, r.circuit.value),
    'acdb': lambda r: (r.brand, r.phase.value),
    'dcdb': lambda r: (r.brand, r.phase.value),
    'dcr': lambda r: (r.system_kw, r.phase.value, r.inverter_kw, r.panel_brand),
    'non_dcr': lambda r: (r.system_kw, r.phase.value, r.inverter_kw, r.panel_brand),
    'both': lambda r: (r.system_kw, r.phase.value, r.inverter_kw, r.dcr_kw, r.non_dcr_kw, r.panel_brand),
    'system_configs': lambda r: (r.system_type.value, r.system_kw, r.panel_brand),
}

# Parsed size attributes per table; None means the label did not parse
_SIZE_FIELDS = {
    'panels': ('watts',),
    'inverters': ('kw',),
    'structures': ('kw',),
    'dcr': ('system_kw', 'inverter_kw'),
    'non_dcr': ('system_kw', 'inverter_kw'),
    'both': ('system_kw', 'inverter_kw', 'dcr_kw', 'non_dcr_kw'),
    'system_configs': ('system_kw', 'panel_watts'),
}


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def find_duplicate_keys(catalog: PricingCatalog) -> dict[str, list[str]]:
    """Keys that appear more than once, per table."""
    duplicates = {}
    for name in TABLE_NAMES:
        key = _TABLE_KEYS[name]
        counts = Counter(key(row) for row in getattr(catalog, name))
        repeated = [" / ".join(str(part) for part in k) for k, n in counts.items() if n > 1]
        if repeated:
            duplicates[name] = repeated
    return duplicates


def find_unparseable_sizes(catalog: PricingCatalog) -> list[str]:
    problems = []
    for name, attrs in _SIZE_FIELDS.items():
        for index, row in enumerate(getattr(catalog, name)):
            bad = [attr for attr in attrs if getattr(row, attr) is None]
            if bad:
                problems.append(f"{name} row {index + 1}: unparseable {', '.join(bad)} in {row!r}")
    return problems


def _input_files(source: Path) -> dict:
    if source.is_dir():
        files = sorted(source.glob('*.csv'))
    else:
        files = [source]
    return {f.stem: {"path": str(f), "hash": get_file_hash(f)} for f in files}


def build_catalog_report(source: Optional[Union[str, Path]] = None,
                         settings: Optional[Settings] = None,
                         verbose: bool = True,
                         write: bool = True) -> dict:
    """
    Load and audit a catalog source, then save the build report.

    Args:
        source: Catalog directory, workbook or JSON file (default: configured source)
        settings: Optional settings override
        verbose: Print progress messages
        write: Save the report to settings.build_report

    Returns:
        Build report dictionary
    """
    settings = settings or get_settings()
    source = Path(source or settings.catalog_source or settings.default_catalog_dir)

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "source": str(source),
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    if not source.exists():
        msg = f"CRITICAL ERROR: {source} not found."
        report["errors"].append(msg)
        report["status"] = "failed"
        if verbose:
            print(msg)
        return _save(report, settings, verbose, write)

    report["input_files"] = _input_files(source)

    try:
        catalog = load_catalog(source)
    except CatalogLoadError as e:
        msg = f"ERROR: Failed to load {source}. {e}"
        report["errors"].append(msg)
        report["status"] = "failed"
        if verbose:
            print(msg)
        return _save(report, settings, verbose, write)

    report["metrics"]["table_sizes"] = catalog.table_sizes()
    report["metrics"]["reference_brands"] = list(catalog.reference_brands)
    report["metrics"]["default_reference_brand"] = catalog.default_reference_brand
    for name, count in catalog.table_sizes().items():
        if count == 0:
            report["warnings"].append(f"WARNING: {name} table is empty")

    duplicates = find_duplicate_keys(catalog)
    report["metrics"]["duplicate_keys"] = {name: len(keys) for name, keys in duplicates.items()}
    for name, keys in duplicates.items():
        for key in keys:
            report["warnings"].append(f"Duplicate {name} key {key} (first row wins)")

    unparseable = find_unparseable_sizes(catalog)
    report["metrics"]["unparseable_sizes"] = len(unparseable)
    report["warnings"].extend(unparseable)

    findings = audit_phase_rules(catalog)
    report["metrics"]["phase_rule_conflicts"] = len(findings)
    report["phase_audit"] = findings
    for f in findings:
        report["warnings"].append(
            f"{f['table']} {f['system_size']} / {f['inverter_size']} {f['panel_brand']}: "
            f"recorded {f['recorded_phase']}, heuristic says {f['expected_phase']}"
        )

    report["status"] = "success"

    if verbose:
        print(f"\nPROCESS COMPLETE: {source} loaded.")
        for name, count in catalog.table_sizes().items():
            print(f"  {name:<15} {count:>5} rows")
        print(f"  {len(report['warnings'])} warning(s), {len(findings)} phase rule conflict(s)")

    return _save(report, settings, verbose, write)


def _save(report: dict, settings: Settings, verbose: bool, write: bool) -> dict:
    if not write or settings.build_report is None:
        return report

    report_path = settings.build_report
    try:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, 'w') as f:
            json.dump(report, f, indent=2)
    except OSError as e:
        logger.error("Could not write build report to %s: %s", report_path, e)
        report["errors"].append(f"ERROR: Could not write build report. {e}")
        return report

    if verbose:
        print(f"Build report saved to: {report_path}")
    return report


if __name__ == "__main__":
    build_catalog_report()
