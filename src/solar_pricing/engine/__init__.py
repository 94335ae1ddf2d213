"""Engine subpackage - pricing and configuration resolution."""
from .catalog import PricingCatalog, default_catalog
from .models import Phase, ProductSelection, QuoteLine, QuoteResult, SystemConfigurationPreset, SystemType
from .pricing_engine import PricingEngine

__all__ = [
    'PricingCatalog', 'default_catalog', 'Phase', 'ProductSelection', 'QuoteLine', 'QuoteResult',
    'SystemConfigurationPreset', 'SystemType', 'PricingEngine',
]
