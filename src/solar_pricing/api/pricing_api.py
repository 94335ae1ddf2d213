"""
Pricing API - FastAPI router for component and package prices.
"""
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..engine import component_pricing as components
from .state import engine

router = APIRouter(prefix="/prices", tags=["prices"])


class PackagePriceRequest(BaseModel):
    """Request model for a package price lookup."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    system_type: str
    system_size: str
    phase: str
    inverter_size: str
    panel_brand: str
    dcr_capacity: Optional[str] = None
    non_dcr_capacity: Optional[str] = None


class PriceResponse(BaseModel):
    """Response model for a single price."""
    component: str
    price: Optional[float]


@router.get("/panel", response_model=PriceResponse)
async def panel_price(brand: str, size: str):
    """Price of one panel."""
    return PriceResponse(component="panel",
                         price=components.get_panel_price(brand, size, engine.catalog))


@router.get("/inverter", response_model=PriceResponse)
async def inverter_price(brand: str, size: str):
    return PriceResponse(component="inverter",
                         price=components.get_inverter_price(brand, size, engine.catalog))


@router.get("/structure", response_model=PriceResponse)
async def structure_price(type: str, size: str):
    return PriceResponse(component="structure",
                         price=components.get_structure_price(type, size, engine.catalog))


@router.get("/meter", response_model=PriceResponse)
async def meter_price(brand: str):
    return PriceResponse(component="meter", price=components.get_meter_price(brand, engine.catalog))


@router.get("/cable", response_model=PriceResponse)
async def cable_price(brand: str, size: str = "", circuit: str = "AC"):
    """Cable price; `circuit` is AC or DC."""
    return PriceResponse(component="cable",
                         price=components.get_cable_price(brand, size, circuit, engine.catalog))


@router.get("/acdb", response_model=PriceResponse)
async def acdb_price(brand: str, phase: str):
    return PriceResponse(component="acdb", price=components.get_acdb_price(brand, phase, engine.catalog))


@router.get("/dcdb", response_model=PriceResponse)
async def dcdb_price(brand: str, phase: str):
    return PriceResponse(component="dcdb", price=components.get_dcdb_price(brand, phase, engine.catalog))


@router.post("/package", response_model=PriceResponse)
async def package_price(req: PackagePriceRequest):
    """Tabulated package price; null when the catalog has no such package."""
    price = engine.package_price(
        req.system_type, req.system_size, req.phase, req.inverter_size, req.panel_brand,
        dcr_capacity=req.dcr_capacity, non_dcr_capacity=req.non_dcr_capacity,
    )
    return PriceResponse(component="package", price=price)
