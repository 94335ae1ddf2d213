"""
Data models for the solar pricing engine.

Uses dataclasses for structured, type-safe data representation.
Catalog rows are frozen and parse their size labels once, on construction,
so lookups work on numbers instead of strings.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .sizes import parse_kw, parse_watts


class Phase(str, Enum):
    """Electrical supply type."""
    ONE_PHASE = "1-Phase"
    THREE_PHASE = "3-Phase"

    @classmethod
    def parse(cls, value) -> Optional['Phase']:
        """Accept a Phase, its label ("1-Phase") or a loose spelling ("3 phase", "ThreePhase")."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        text = str(value).strip().lower().replace(" ", "").replace("-", "").replace("_", "")
        if text in ("1phase", "onephase", "single", "singlephase"):
            return cls.ONE_PHASE
        if text in ("3phase", "threephase", "three"):
            return cls.THREE_PHASE
        return None


class SystemType(str, Enum):
    """Panel category of a system."""
    DCR = "dcr"
    NON_DCR = "non-dcr"
    BOTH = "both"

    @property
    def label(self) -> str:
        return {"dcr": "DCR", "non-dcr": "NON DCR", "both": "BOTH"}[self.value]

    @classmethod
    def parse(cls, value) -> Optional['SystemType']:
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        text = str(value).strip().lower().replace("_", "-").replace(" ", "-")
        if text in ("nondcr", "non-dcr"):
            return cls.NON_DCR
        for member in cls:
            if member.value == text:
                return member
        return None


class Circuit(str, Enum):
    """Cable circuit side."""
    AC = "AC"
    DC = "DC"

    @classmethod
    def parse(cls, value) -> Optional['Circuit']:
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        return cls(text) if text in ("AC", "DC") else None


def _set(obj, name: str, value):
    # Frozen dataclasses only allow derived fields to be set this way
    object.__setattr__(obj, name, value)


# ============================================================================
# Catalog rows
# ============================================================================

@dataclass(frozen=True)
class PanelPrice:
    """Price of one panel of a brand at a wattage."""
    brand: str
    size: str  # "545W"
    price: float
    watts: Optional[float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, 'watts', parse_watts(self.size))


@dataclass(frozen=True)
class InverterPrice:
    brand: str
    size: str  # "5kW"
    price: float
    kw: Optional[float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, 'kw', parse_kw(self.size))


@dataclass(frozen=True)
class StructurePrice:
    type: str  # "GI Structure"
    size: str
    price: float
    kw: Optional[float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, 'kw', parse_kw(self.size))


@dataclass(frozen=True)
class MeterPrice:
    brand: str
    price: float


@dataclass(frozen=True)
class CablePrice:
    brand: str
    size: str  # "4 sq mm"
    circuit: Circuit
    price: float


@dataclass(frozen=True)
class DistributionBoardPrice:
    """ACDB or DCDB price for a brand and phase."""
    brand: str
    phase: Phase
    price: float


@dataclass(frozen=True)
class SystemPrice:
    """Turnkey package price for a DCR or NON DCR system."""
    system_size: str
    phase: Phase
    inverter_size: str
    panel_brand: str
    price: float
    system_kw: Optional[float] = field(init=False, repr=False, compare=False)
    inverter_kw: Optional[float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, 'system_kw', parse_kw(self.system_size))
        _set(self, 'inverter_kw', parse_kw(self.inverter_size))


@dataclass(frozen=True)
class BothSystemPrice:
    """Package price for a mixed DCR + NON DCR system."""
    system_size: str
    phase: Phase
    inverter_size: str
    dcr_capacity: str
    non_dcr_capacity: str
    panel_brand: str
    price: float
    system_kw: Optional[float] = field(init=False, repr=False, compare=False)
    inverter_kw: Optional[float] = field(init=False, repr=False, compare=False)
    dcr_kw: Optional[float] = field(init=False, repr=False, compare=False)
    non_dcr_kw: Optional[float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, 'system_kw', parse_kw(self.system_size))
        _set(self, 'inverter_kw', parse_kw(self.inverter_size))
        _set(self, 'dcr_kw', parse_kw(self.dcr_capacity))
        _set(self, 'non_dcr_kw', parse_kw(self.non_dcr_capacity))


@dataclass(frozen=True)
class SystemConfigurationPreset:
    """Default bill of materials for one (system type, size, panel brand)."""
    system_type: SystemType
    system_size: str
    panel_brand: str
    panel_size: str
    inverter_brand: str
    inverter_size: str
    inverter_type: str
    structure_type: str
    structure_size: str
    meter_brand: str
    ac_cable_brand: str
    ac_cable_size: str
    dc_cable_brand: str
    dc_cable_size: str
    acdb: str
    dcdb: str
    central_subsidy: Optional[float] = None
    state_subsidy: Optional[float] = None
    system_kw: Optional[float] = field(init=False, repr=False, compare=False)
    panel_watts: Optional[float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, 'system_kw', parse_kw(self.system_size))
        _set(self, 'panel_watts', parse_watts(self.panel_size))


# ============================================================================
# Selections and quotes
# ============================================================================

@dataclass
class PanelGroup:
    """A homogeneous group of panels in a selection."""
    brand: str
    size: str
    quantity: int
    type: str = ""  # "dcr" / "non-dcr" for mixed systems


@dataclass
class ProductSelection:
    """Everything a quotation needs. Owned by the caller, never kept by the engine."""
    system_type: str = ""
    system_size: str = ""  # nominal size, e.g. "5kW"; the panel array may be slightly larger
    panel_brand: str = ""
    panel_size: str = ""
    panel_quantity: int = 0
    inverter_type: str = ""
    inverter_brand: str = ""
    inverter_size: str = ""
    structure_type: str = ""
    structure_size: str = ""
    meter_brand: str = ""
    ac_cable_brand: str = ""
    ac_cable_size: str = ""
    dc_cable_brand: str = ""
    dc_cable_size: str = ""
    acdb: str = ""
    dcdb: str = ""
    central_subsidy: Optional[float] = None
    state_subsidy: Optional[float] = None

    # BOTH systems carry two panel groups
    dcr_capacity: Optional[str] = None
    non_dcr_capacity: Optional[str] = None
    dcr_panel_brand: Optional[str] = None
    dcr_panel_size: Optional[str] = None
    dcr_panel_quantity: Optional[int] = None
    non_dcr_panel_brand: Optional[str] = None
    non_dcr_panel_size: Optional[str] = None
    non_dcr_panel_quantity: Optional[int] = None

    custom_panels: list[PanelGroup] = field(default_factory=list)

    def panel_groups(self) -> list[PanelGroup]:
        """Panel groups to price, in order of precedence: custom, dual (BOTH), single."""
        if self.custom_panels:
            return list(self.custom_panels)
        if self.dcr_panel_quantity or self.non_dcr_panel_quantity:
            groups = []
            if self.dcr_panel_quantity:
                groups.append(PanelGroup(
                    brand=self.dcr_panel_brand or "",
                    size=self.dcr_panel_size or "",
                    quantity=self.dcr_panel_quantity,
                    type=SystemType.DCR.value,
                ))
            if self.non_dcr_panel_quantity:
                groups.append(PanelGroup(
                    brand=self.non_dcr_panel_brand or "",
                    size=self.non_dcr_panel_size or "",
                    quantity=self.non_dcr_panel_quantity,
                    type=SystemType.NON_DCR.value,
                ))
            return groups
        if self.panel_quantity:
            return [PanelGroup(self.panel_brand, self.panel_size, self.panel_quantity, self.system_type)]
        return []


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class QuoteLine:
    """A single bill-of-materials line in a quote."""
    component: str  # "panel", "inverter", ...
    description: str
    quantity: int
    unit_price: float
    extended_price: float
    source: str  # "Catalog", "Scaled", "Default"
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class QuoteResult:
    """Complete result of pricing a product selection."""
    system_type: str
    system_size: str
    phase: Optional[str]
    lines: list[QuoteLine]
    subtotal: float = 0.0
    subsidy: float = 0.0
    net_total: float = 0.0
    package_price: Optional[float] = None
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a result-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_summary_dict(self) -> dict:
        """Flat dict of the quote, shaped like the quotation screen's price table."""
        return {
            "System Type": self.system_type,
            "System Size": self.system_size,
            "Phase": self.phase,
            "Subtotal": self.subtotal,
            "Subsidy": self.subsidy,
            "Total": self.net_total,
            "Package Price": self.package_price,
            "Lines": [
                {
                    "Component": line.component,
                    "Description": line.description,
                    "Quantity": line.quantity,
                    "Unit Price": line.unit_price,
                    "Total": line.extended_price,
                    "Source": line.source,
                }
                for line in self.lines
            ]
        }
