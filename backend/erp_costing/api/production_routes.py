"""
Production Costing API Routes

POST /api/production/bom/totals          — cost breakdown of a BOM (form payload)
POST /api/production/bom/summary         — normalize a raw backend BOM record + listing figures
POST /api/production/orders/preview      — cost preview while drafting an OP
POST /api/production/orders/projection   — OP cost projection, sale price <-> markup
POST /api/production/pricing/sale-price  — sale price from unit cost + markup
POST /api/production/pricing/markup      — markup from unit cost + sale price

All endpoints are stateless computations; persistence of BOMs and orders is
handled by the ERP backend.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel, Field

from erp_costing.config import DEFAULT_BOM_VERSION, MAX_COMPONENT_CODE_LENGTH, NOTES_MAX_LENGTH
from erp_costing.services.bom_calculator import (
    compute_bom_totals,
    preview_order_totals,
    summarize_bom,
)
from erp_costing.services.field_mapping import (
    FieldMappingError,
    bom_from_api,
    bom_summary_to_api,
    bom_totals_to_api,
    order_cost_inputs_from_api,
    projection_to_api,
)
from erp_costing.services.formatters import bom_summary_display, projection_display
from erp_costing.services.production_projector import (
    PriceDriver,
    compute_production_projection,
    derive_markup,
    derive_sale_price,
)

router = APIRouter(prefix="/api/production", tags=["Production Costing"])
logger = logging.getLogger("erp-costing-api")


# ── Pydantic Models ─────────────────────────────────────────────────────────

class BomItemIn(BaseModel):
    component_code: str = Field(..., min_length=1, max_length=MAX_COMPONENT_CODE_LENGTH)
    description: Optional[str] = None
    quantity: float = Field(..., gt=0, allow_inf_nan=False)
    unit_cost: float = Field(0.0, ge=0, allow_inf_nan=False)


class BomIn(BaseModel):
    product_code: str = ""
    version: str = DEFAULT_BOM_VERSION
    lot_size: float = Field(0.0, ge=0, allow_inf_nan=False)
    validity_days: int = Field(0, ge=0)
    margin_target: float = Field(0.0, ge=0, allow_inf_nan=False)
    margin_achieved: float = Field(0.0, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=NOTES_MAX_LENGTH)
    items: List[BomItemIn] = []


class OrderPreviewRequest(BaseModel):
    product_code: str = ""
    quantity_planned: float = Field(0.0, allow_inf_nan=False)
    reference_bom: Optional[BomIn] = None


class ProjectionRequest(BaseModel):
    bom_items: List[BomItemIn] = []
    quantity_planned: float = Field(0.0, allow_inf_nan=False)
    boxes_qty: float = Field(0.0, ge=0, allow_inf_nan=False)
    box_cost: float = Field(0.0, ge=0, allow_inf_nan=False)
    labor_per_unit: float = Field(0.0, ge=0, allow_inf_nan=False)
    sale_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    markup: float = Field(0.0, allow_inf_nan=False)
    post_sale_tax: float = Field(0.0, ge=0, allow_inf_nan=False)
    price_driver: PriceDriver = PriceDriver.MARKUP


class SalePriceRequest(BaseModel):
    unit_cost: float = Field(..., allow_inf_nan=False)
    markup: float = Field(..., allow_inf_nan=False)


class MarkupRequest(BaseModel):
    unit_cost: float = Field(..., allow_inf_nan=False)
    sale_price: float = Field(..., allow_inf_nan=False)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _decode_bom(record: Dict[str, Any], request: Request):
    try:
        return bom_from_api(record)
    except FieldMappingError as e:
        logger.warning(
            f"Rejected BOM record: {e}",
            extra={"request_id": _request_id(request), "product_code": record.get("product_code", "")},
        )
        raise HTTPException(status_code=422, detail=str(e))


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _log_priced(request: Request, message: str, **fields) -> None:
    logger.info(message, extra={"request_id": _request_id(request), **fields})


# ── BOM ──────────────────────────────────────────────────────────────────────

@router.post("/bom/totals")
async def bom_totals(req: BomIn, request: Request):
    """Ingredient cost, fixed-ratio overheads, lot/unit cost and achieved margin."""
    bom = _decode_bom(req.model_dump(), request)
    totals = compute_bom_totals(bom)
    _log_priced(
        request, "BOM totals computed",
        product_code=bom.product_code, line_count=len(bom.items), unit_cost=totals.unit,
    )
    return bom_totals_to_api(totals)


@router.post("/bom/summary")
async def bom_summary(request: Request, record: Dict[str, Any] = Body(...), display: bool = False):
    """
    Decode a BOM record exactly as the ERP backend returns it (numbers may
    arrive as strings) and attach total_cost, unit_cost and the
    stored-or-derived margin_achieved. ``?display=true`` adds pt-BR
    formatted columns.
    """
    bom = _decode_bom(record, request)
    summary = summarize_bom(bom)
    _log_priced(
        request, "BOM summarized",
        product_code=bom.product_code, line_count=len(bom.items), unit_cost=summary.unit_cost,
    )
    body = bom_summary_to_api(summary)
    if display:
        body["display"] = bom_summary_display(summary)
    return body


# ── Production orders ────────────────────────────────────────────────────────

@router.post("/orders/preview")
async def order_preview(req: OrderPreviewRequest, request: Request):
    """Reference BOM recomputed with the planned quantity as lot size."""
    reference = _decode_bom(req.reference_bom.model_dump(), request) if req.reference_bom else None
    totals = preview_order_totals(reference, req.quantity_planned, req.product_code)
    _log_priced(
        request, "Order preview computed",
        product_code=reference.product_code if reference else req.product_code,
        quantity_planned=req.quantity_planned, unit_cost=totals.unit,
    )
    return bom_totals_to_api(totals)


@router.post("/orders/projection")
async def order_projection(req: ProjectionRequest, request: Request, display: bool = False):
    body = req.model_dump()
    lines = _decode_bom({"items": body["bom_items"]}, request).items
    try:
        inputs = order_cost_inputs_from_api(body)
    except FieldMappingError as e:
        logger.warning(f"Rejected order cost inputs: {e}", extra={"request_id": _request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    projection = compute_production_projection(lines, inputs, req.price_driver)
    _log_priced(
        request, "Order projection computed",
        price_driver=projection.price_driver.value, quantity_planned=inputs.quantity_planned,
        line_count=len(lines), unit_cost=projection.production_unit_cost,
    )
    result = projection_to_api(projection)
    if display:
        result["display"] = projection_display(projection)
    return result


# ── Pricing helpers ──────────────────────────────────────────────────────────

@router.post("/pricing/sale-price")
async def pricing_sale_price(req: SalePriceRequest):
    return {"sale_price": derive_sale_price(req.unit_cost, req.markup)}


@router.post("/pricing/markup")
async def pricing_markup(req: MarkupRequest):
    return {"markup": derive_markup(req.unit_cost, req.sale_price)}
