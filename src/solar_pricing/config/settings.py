"""
Centralized settings and path configuration for the solar pricing engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

PACKAGE_ROOT = Path(__file__).resolve().parent.parent

CATALOG_ENV_VAR = 'SOLAR_PRICING_CATALOG'
LOG_LEVEL_ENV_VAR = 'SOLAR_PRICING_LOG_LEVEL'


def default_catalog_dir() -> Path:
    """Directory holding the bundled default catalog CSVs."""
    return PACKAGE_ROOT / 'data' / 'defaults'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file (src/solar_pricing/config/settings.py)
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Input catalog
    default_catalog_dir: Path
    catalog_source: Optional[Path] = None  # CSV dir, .xlsx workbook or .json payload

    # Outputs
    build_report: Optional[Path] = None
    golden_cases: Optional[Path] = None

    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        source = os.environ.get(CATALOG_ENV_VAR, '').strip()

        return cls(
            project_root=root,
            default_catalog_dir=default_catalog_dir(),
            catalog_source=Path(source) if source else None,
            build_report=PACKAGE_ROOT / 'data' / 'outputs' / 'build_report.json',
            golden_cases=root / 'tests' / 'golden_cases.csv',
            log_level=os.environ.get(LOG_LEVEL_ENV_VAR, 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
