"""
Configurations API - FastAPI router for system configuration presets.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..engine.configuration import (
    both_product_selection,
    config_to_product_selection,
    get_system_config_by_id,
    get_system_config_options,
    get_system_config_options_by_brand,
    get_system_config_options_by_type,
    get_system_configuration,
    resolve_both_configuration,
)
from ..engine.models import SystemType
from .state import engine

router = APIRouter(prefix="/configurations", tags=["configurations"])


class BothConfigRequest(BaseModel):
    """Request model for splitting a BOTH preset into DCR and NON DCR panel groups."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    system_size: str
    panel_brand: str = ""
    dcr_capacity: str
    non_dcr_capacity: str


@router.get("")
async def list_configurations(system_type: Optional[str] = None, panel_brand: Optional[str] = None):
    """All presets as dropdown options, optionally filtered by type and/or panel brand."""
    if system_type:
        options = get_system_config_options_by_type(system_type, engine.catalog)
    else:
        options = get_system_config_options(engine.catalog)
    if panel_brand:
        brand_ids = {o.id for o in get_system_config_options_by_brand(panel_brand, engine.catalog)}
        options = [o for o in options if o.id in brand_ids]
    return jsonable_encoder(options)


@router.get("/resolve")
async def resolve_configuration(system_type: str, system_size: str, panel_brand: str = "",
                                panel_quantity: Optional[int] = None):
    """Best matching preset and the selection it fills in; both null if the type has no presets."""
    preset = get_system_configuration(system_type, system_size, panel_brand, engine.catalog)
    if preset is None:
        return {"preset": None, "selection": None}
    return jsonable_encoder({
        "preset": preset,
        "selection": config_to_product_selection(preset, panel_quantity),
    })


@router.post("/both")
async def both_configuration(req: BothConfigRequest):
    """Split the matching BOTH preset into its two panel groups."""
    preset = get_system_configuration(SystemType.BOTH, req.system_size, req.panel_brand, engine.catalog)
    if preset is None:
        return {"preset": None, "dcr": None, "non_dcr": None, "selection": None}
    dcr, non_dcr = resolve_both_configuration(req.dcr_capacity, req.non_dcr_capacity, preset)
    return jsonable_encoder({
        "preset": preset,
        "dcr": dcr,
        "non_dcr": non_dcr,
        "selection": both_product_selection(preset, req.dcr_capacity, req.non_dcr_capacity),
    })


@router.get("/{config_id}")
async def get_configuration(config_id: str):
    """Get a single preset by its dropdown option ID."""
    preset = get_system_config_by_id(config_id, engine.catalog)
    if preset is None:
        raise HTTPException(status_code=404, detail=f"Configuration '{config_id}' not found")
    return jsonable_encoder(preset)
