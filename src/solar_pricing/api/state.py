"""
Shared API state - the one engine every router prices against.
"""
import logging
from typing import Optional

from ..config.settings import get_settings
from ..data.catalog_loader import CatalogLoadError, load_catalog
from ..engine import PricingEngine, default_catalog

logger = logging.getLogger(__name__)


def _initial_engine() -> PricingEngine:
    source = get_settings().catalog_source
    try:
        return PricingEngine.from_source(source)
    except CatalogLoadError as e:
        logger.error("Could not load catalog from %s, serving the bundled defaults: %s", source, e)
        return PricingEngine(default_catalog())


engine = _initial_engine()


def reload_catalog(source: Optional[str] = None) -> PricingEngine:
    """
    Load a fresh catalog and swap it into the shared engine.

    Raises CatalogLoadError and leaves the current catalog in place if the
    source is invalid.
    """
    catalog = load_catalog(source or get_settings().catalog_source)
    engine.catalog = catalog
    logger.info("Catalog reloaded: %s", catalog.table_sizes())
    return engine
