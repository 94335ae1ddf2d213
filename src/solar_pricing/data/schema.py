"""
Catalog schema - validates pricing tables coming from outside the engine.

Accepts both the backend's camelCase JSON (`nonDcr`, `systemConfigs`,
`panelType`, ...) and the snake_case column names used by the CSV/Excel
sources, then converts rows to the engine's frozen row types.
"""
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..engine.models import (
    BothSystemPrice,
    CablePrice,
    Circuit,
    DistributionBoardPrice,
    InverterPrice,
    MeterPrice,
    PanelPrice,
    Phase,
    StructurePrice,
    SystemConfigurationPreset,
    SystemPrice,
    SystemType,
)


class _Row(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra='ignore',
    )


class _PhaseRow(_Row):
    phase: Phase

    @field_validator('phase', mode='before')
    @classmethod
    def _parse_phase(cls, value):
        phase = Phase.parse(value)
        if phase is None:
            raise ValueError(f"unknown phase {value!r}, expected '1-Phase' or '3-Phase'")
        return phase


class PanelRow(_Row):
    brand: str
    size: str
    price: float = Field(ge=0)

    def to_model(self) -> PanelPrice:
        return PanelPrice(brand=self.brand, size=self.size, price=self.price)


class InverterRow(_Row):
    brand: str
    size: str
    price: float = Field(ge=0)

    def to_model(self) -> InverterPrice:
        return InverterPrice(brand=self.brand, size=self.size, price=self.price)


class StructureRow(_Row):
    type: str
    size: str
    price: float = Field(ge=0)

    def to_model(self) -> StructurePrice:
        return StructurePrice(type=self.type, size=self.size, price=self.price)


class MeterRow(_Row):
    brand: str
    price: float = Field(ge=0)

    def to_model(self) -> MeterPrice:
        return MeterPrice(brand=self.brand, price=self.price)


class CableRow(_Row):
    brand: str
    size: str
    circuit: Circuit = Field(validation_alias=AliasChoices('circuit', 'type'))
    price: float = Field(ge=0)

    @field_validator('circuit', mode='before')
    @classmethod
    def _parse_circuit(cls, value):
        circuit = Circuit.parse(value)
        if circuit is None:
            raise ValueError(f"unknown cable type {value!r}, expected 'AC' or 'DC'")
        return circuit

    def to_model(self) -> CablePrice:
        return CablePrice(brand=self.brand, size=self.size, circuit=self.circuit, price=self.price)


class BoardRow(_PhaseRow):
    brand: str
    price: float = Field(ge=0)

    def to_model(self) -> DistributionBoardPrice:
        return DistributionBoardPrice(brand=self.brand, phase=self.phase, price=self.price)


_PANEL_BRAND = AliasChoices('panel_brand', 'panelBrand', 'panelType', 'panel_type')


class SystemPriceRow(_PhaseRow):
    system_size: str
    inverter_size: str
    panel_brand: str = Field(validation_alias=_PANEL_BRAND)
    price: float = Field(ge=0)

    def to_model(self) -> SystemPrice:
        return SystemPrice(
            system_size=self.system_size,
            phase=self.phase,
            inverter_size=self.inverter_size,
            panel_brand=self.panel_brand,
            price=self.price,
        )


class BothSystemPriceRow(SystemPriceRow):
    dcr_capacity: str
    non_dcr_capacity: str

    def to_model(self) -> BothSystemPrice:
        return BothSystemPrice(
            system_size=self.system_size,
            phase=self.phase,
            inverter_size=self.inverter_size,
            dcr_capacity=self.dcr_capacity,
            non_dcr_capacity=self.non_dcr_capacity,
            panel_brand=self.panel_brand,
            price=self.price,
        )


class SystemConfigRow(_Row):
    system_type: SystemType
    system_size: str
    panel_brand: str
    panel_size: str
    inverter_brand: str
    inverter_size: str
    inverter_type: str = ""
    structure_type: str = ""
    structure_size: str = ""
    meter_brand: str = ""
    ac_cable_brand: str = ""
    ac_cable_size: str = ""
    dc_cable_brand: str = ""
    dc_cable_size: str = ""
    acdb: str = ""
    dcdb: str = ""
    central_subsidy: Optional[float] = Field(default=None, ge=0)
    state_subsidy: Optional[float] = Field(default=None, ge=0)

    @field_validator('system_type', mode='before')
    @classmethod
    def _parse_system_type(cls, value):
        system_type = SystemType.parse(value)
        if system_type is None:
            raise ValueError(f"unknown system type {value!r}")
        return system_type

    def to_model(self) -> SystemConfigurationPreset:
        return SystemConfigurationPreset(**self.model_dump())


class CatalogPayload(BaseModel):
    """The full pricing-tables document. Every table is optional."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    panels: Optional[list[PanelRow]] = None
    inverters: Optional[list[InverterRow]] = None
    structures: Optional[list[StructureRow]] = None
    meters: Optional[list[MeterRow]] = None
    cables: Optional[list[CableRow]] = None
    acdb: Optional[list[BoardRow]] = None
    dcdb: Optional[list[BoardRow]] = None
    dcr: Optional[list[SystemPriceRow]] = None
    non_dcr: Optional[list[SystemPriceRow]] = None
    both: Optional[list[BothSystemPriceRow]] = None
    system_configs: Optional[list[SystemConfigRow]] = None

    reference_brands: Optional[list[str]] = None
    default_reference_brand: Optional[str] = None

    def to_tables(self) -> dict:
        """Convert to {table_name: [row, ...]}; tables not supplied map to None."""
        tables = {}
        for name in ('panels', 'inverters', 'structures', 'meters', 'cables', 'acdb', 'dcdb',
                     'dcr', 'non_dcr', 'both', 'system_configs'):
            rows = getattr(self, name)
            tables[name] = None if rows is None else [row.to_model() for row in rows]
        return tables

    def catalog_options(self) -> dict:
        return {
            'reference_brands': tuple(self.reference_brands) if self.reference_brands else None,
            'default_reference_brand': self.default_reference_brand,
        }
