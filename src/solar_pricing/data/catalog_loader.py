"""
Catalog Loader - Builds a PricingCatalog from CSV folders, Excel workbooks or
the backend's pricing-tables JSON.

All sources go through the same pydantic schema, so a row that is valid in one
format is valid in all of them.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd
from pydantic import ValidationError

from ..engine.catalog import TABLE_NAMES, PricingCatalog, default_catalog
from .schema import CatalogPayload

logger = logging.getLogger(__name__)


class CatalogLoadError(ValueError):
    """A catalog source could not be read or failed validation."""


def _frame_to_rows(df: pd.DataFrame) -> list[dict]:
    """Strip headers and cells; blank cells become None."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    df = df.dropna(how='all')
    df = df.astype(object).where(pd.notna(df), None)
    rows = []
    for record in df.to_dict(orient='records'):
        row = {}
        for key, value in record.items():
            if isinstance(value, str):
                value = value.strip()
                if value == '':
                    value = None
            row[key] = value
        row = {k: v for k, v in row.items() if v is not None}
        if row:
            rows.append(row)
    return rows


def _build(raw: dict, source: str, fill_defaults: bool) -> PricingCatalog:
    try:
        payload = CatalogPayload.model_validate(raw)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid pricing catalog from {source}: {e}") from e

    defaults = default_catalog() if fill_defaults else None
    catalog = PricingCatalog.from_tables(payload.to_tables(), defaults=defaults, **payload.catalog_options())
    logger.info("Loaded pricing catalog from %s: %s", source, catalog.table_sizes())
    return catalog


def load_catalog_payload(payload: dict, fill_defaults: bool = True) -> PricingCatalog:
    """Build a catalog from the backend's pricing-tables document."""
    if not isinstance(payload, dict):
        raise CatalogLoadError(f"Pricing catalog payload must be an object, got {type(payload).__name__}")
    return _build(payload, "payload", fill_defaults)


def load_catalog_dir(path: Path, fill_defaults: bool = True) -> PricingCatalog:
    """
    Load one CSV per table from a directory (panels.csv, dcr.csv, ...).

    Missing files leave the table to the defaults when `fill_defaults` is set.
    """
    path = Path(path)
    if not path.is_dir():
        raise CatalogLoadError(f"Catalog directory not found: {path}")

    raw = {}
    for name in TABLE_NAMES:
        csv_path = path / f'{name}.csv'
        if not csv_path.exists():
            continue
        try:
            df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as e:
            raise CatalogLoadError(f"Failed to read {csv_path}: {e}") from e
        raw[name] = _frame_to_rows(df)

    if not raw:
        logger.warning("No catalog tables found in %s", path)
    return _build(raw, str(path), fill_defaults)


def load_catalog_workbook(path: Path, fill_defaults: bool = True) -> PricingCatalog:
    """Load a workbook with one sheet per table, sheet names as in TABLE_NAMES."""
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"Catalog workbook not found: {path}")

    try:
        sheets = pd.read_excel(path, sheet_name=None, dtype=str)
    except (OSError, ValueError) as e:
        raise CatalogLoadError(f"Failed to read {path}: {e}") from e

    raw = {}
    for sheet_name, df in sheets.items():
        name = str(sheet_name).strip().lower().replace(' ', '_').replace('-', '_')
        if name not in TABLE_NAMES:
            logger.warning("Ignoring unknown sheet %r in %s", sheet_name, path)
            continue
        raw[name] = _frame_to_rows(df)
    return _build(raw, str(path), fill_defaults)


def load_catalog_json(path: Path, fill_defaults: bool = True) -> PricingCatalog:
    """Load a saved pricing-tables JSON document."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"Failed to read {path}: {e}") from e

    # The backend wraps responses as {"data": {...}}
    if isinstance(payload, dict) and isinstance(payload.get('data'), dict):
        payload = payload['data']
    if not isinstance(payload, dict):
        raise CatalogLoadError(f"Pricing catalog in {path} must be a JSON object")
    return _build(payload, str(path), fill_defaults)


def load_catalog(source: Optional[Union[str, Path]], fill_defaults: bool = True) -> PricingCatalog:
    """Load from a directory, .xlsx/.xls workbook or .json file; None means the defaults."""
    if source is None:
        return default_catalog()

    path = Path(source)
    if path.is_dir():
        return load_catalog_dir(path, fill_defaults)
    suffix = path.suffix.lower()
    if suffix in ('.xlsx', '.xls'):
        return load_catalog_workbook(path, fill_defaults)
    if suffix == '.json':
        return load_catalog_json(path, fill_defaults)
    raise CatalogLoadError(f"Unsupported catalog source: {path}")
