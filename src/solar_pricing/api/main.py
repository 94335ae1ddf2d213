import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .. import __version__
from ..config.settings import get_settings
from ..data.catalog_loader import CatalogLoadError
from ..engine.models import PanelGroup, ProductSelection
from .configurations_api import router as configurations_router
from .pricing_api import router as pricing_router
from . import state

logging.basicConfig(level=get_settings().log_level, format="%(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="Solar Pricing API",
    description="Pricing and configuration resolution for solar quotations",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pricing_router)
app.include_router(configurations_router)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PanelGroupModel(_CamelModel):
    brand: str
    size: str
    quantity: int
    type: str = ""


class SelectionRequest(_CamelModel):
    """A dealer's product selection, as sent by the quotation form."""
    system_type: str = ""
    system_size: str = ""
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
    central_subsidy: Optional[float] = Field(default=None, ge=0)
    state_subsidy: Optional[float] = Field(default=None, ge=0)
    dcr_capacity: Optional[str] = None
    non_dcr_capacity: Optional[str] = None
    dcr_panel_brand: Optional[str] = None
    dcr_panel_size: Optional[str] = None
    dcr_panel_quantity: Optional[int] = None
    non_dcr_panel_brand: Optional[str] = None
    non_dcr_panel_size: Optional[str] = None
    non_dcr_panel_quantity: Optional[int] = None
    custom_panels: list[PanelGroupModel] = []

    def to_selection(self) -> ProductSelection:
        data = self.model_dump(exclude={'custom_panels'})
        return ProductSelection(
            **data,
            custom_panels=[PanelGroup(**p.model_dump()) for p in self.custom_panels],
        )


class ReloadRequest(BaseModel):
    source: Optional[str] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Solar Pricing API Active"}


@app.get("/system/status")
async def get_status():
    settings = get_settings()
    has_report = settings.build_report is not None and settings.build_report.exists()
    return {
        "engine_active": True,
        "catalog_source": str(settings.catalog_source) if settings.catalog_source else None,
        "catalog_tables": state.engine.catalog.table_sizes(),
        "catalog_last_build": settings.build_report.stat().st_mtime if has_report else None
    }


@app.post("/system/reload")
async def reload_catalog(req: Optional[ReloadRequest] = None):
    """Reload the catalog from its source and swap it into the engine."""
    try:
        engine = state.reload_catalog(req.source if req else None)
    except CatalogLoadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "catalog_tables": engine.catalog.table_sizes()}


@app.get("/system-size")
async def system_size(panel_size: str = "", quantity: int = 0):
    return {"system_size": state.engine.system_size(panel_size, quantity)}


@app.get("/phase")
async def phase(system_size: str, inverter_size: str):
    return {"phase": state.engine.phase(system_size, inverter_size).value}


@app.post("/quote")
async def quote(req: SelectionRequest):
    """Price a full product selection with trace and warnings."""
    result = state.engine.quote(req.to_selection())
    payload = jsonable_encoder(result)
    payload["trace_text"] = result.get_trace_text()
    return payload
