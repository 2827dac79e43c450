"""
Field mapping between backend records (snake_case JSON) and the typed
costing records.

Every record shape has one explicit table of fields; nothing is looked up by
case or underscore variants. Numbers are parsed here, at the boundary:

  - missing / None / blank           -> the field default (0 unless stated)
  - int, float, numeric string       -> float ("12,5" is read as 12.5)
  - anything else, NaN or ±inf       -> FieldMappingError naming the field

The calculators behind this layer never coerce.
"""
import logging
import math
from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional

from erp_costing.config import DEFAULT_BOM_VERSION, NOTES_MAX_LENGTH
from erp_costing.services.bom_calculator import BomDefinition, BomLine, BomSummary, BomTotals
from erp_costing.services.production_projector import (
    ProductionOrderCostInputs,
    ProductionProjection,
    ProjectedLine,
)

logger = logging.getLogger("erp-costing-mapping")


class FieldMappingError(ValueError):
    """A backend record carried a value that cannot be read as its field type."""

    def __init__(self, field_name: str, value: Any, reason: str = "not a number"):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"{field_name}: {reason} ({value!r})")


# ---------------------------------------------------------------------------
# Scalar parsing
# ---------------------------------------------------------------------------

def parse_number(record: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = record.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise FieldMappingError(key, value, "boolean is not a number")
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise FieldMappingError(key, value, "must be finite") from None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            raise FieldMappingError(key, value) from None
    else:
        raise FieldMappingError(key, value)

    if not math.isfinite(number):
        raise FieldMappingError(key, value, "must be finite")
    return number


def parse_int(record: Mapping[str, Any], key: str, default: int = 0) -> int:
    number = parse_number(record, key, float(default))
    if not number.is_integer():
        raise FieldMappingError(key, record.get(key), "must be a whole number")
    return int(number)


def parse_str(record: Mapping[str, Any], key: str, default: str = "") -> str:
    value = record.get(key)
    if value is None:
        return default
    return str(value)


def parse_optional_str(record: Mapping[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    if value is None or str(value).strip() == "":
        return None
    return str(value)


def sanitize_notes(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value[:NOTES_MAX_LENGTH]


# ---------------------------------------------------------------------------
# BOM records
# ---------------------------------------------------------------------------

def bom_line_from_api(record: Mapping[str, Any]) -> BomLine:
    return BomLine(
        component_code=parse_str(record, "component_code"),
        description=parse_optional_str(record, "description"),
        quantity=parse_number(record, "quantity"),
        unit_cost=parse_number(record, "unit_cost"),
    )


def bom_line_to_api(line: BomLine) -> Dict[str, Any]:
    return {
        "component_code": line.component_code,
        "description": line.description,
        "quantity": line.quantity,
        "unit_cost": line.unit_cost,
    }


def bom_from_api(record: Mapping[str, Any]) -> BomDefinition:
    """Decode a /production/bom record. ``items`` may be absent (empty BOM)."""
    raw_items = record.get("items") or []
    if not isinstance(raw_items, list):
        raise FieldMappingError("items", raw_items, "must be a list")
    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, Mapping):
            raise FieldMappingError(f"items[{index}]", raw, "must be an object")
        try:
            items.append(bom_line_from_api(raw))
        except FieldMappingError as exc:
            raise FieldMappingError(f"items[{index}].{exc.field_name}", exc.value, exc.reason) from exc

    bom = BomDefinition(
        product_code=parse_str(record, "product_code"),
        version=parse_str(record, "version", DEFAULT_BOM_VERSION) or DEFAULT_BOM_VERSION,
        lot_size=parse_number(record, "lot_size"),
        validity_days=parse_int(record, "validity_days"),
        margin_target=parse_number(record, "margin_target"),
        margin_achieved=parse_number(record, "margin_achieved"),
        items=items,
        notes=parse_optional_str(record, "notes"),
    )
    logger.debug("Decoded BOM %s v%s with %d items", bom.product_code, bom.version, len(items))
    return bom


def bom_to_api(bom: BomDefinition) -> Dict[str, Any]:
    return {
        "product_code": bom.product_code,
        "version": bom.version,
        "lot_size": bom.lot_size,
        "validity_days": bom.validity_days,
        "margin_target": bom.margin_target,
        "margin_achieved": bom.margin_achieved,
        "notes": sanitize_notes(bom.notes),
        "items": [bom_line_to_api(line) for line in bom.items],
    }


def bom_totals_to_api(totals: BomTotals) -> Dict[str, float]:
    return asdict(totals)


def bom_summary_to_api(summary: BomSummary) -> Dict[str, Any]:
    body = bom_to_api(summary.bom)
    body["margin_achieved"] = summary.margin_achieved
    body["total_cost"] = summary.total_cost
    body["unit_cost"] = summary.unit_cost
    body["totals"] = bom_totals_to_api(summary.totals)
    return body


# ---------------------------------------------------------------------------
# Production order records
# ---------------------------------------------------------------------------

def order_cost_inputs_from_api(record: Mapping[str, Any]) -> ProductionOrderCostInputs:
    return ProductionOrderCostInputs(
        quantity_planned=parse_number(record, "quantity_planned"),
        boxes_qty=parse_number(record, "boxes_qty"),
        box_cost=parse_number(record, "box_cost"),
        labor_per_unit=parse_number(record, "labor_per_unit"),
        sale_price=parse_number(record, "sale_price"),
        markup=parse_number(record, "markup"),
        post_sale_tax=parse_number(record, "post_sale_tax"),
    )


def projected_line_to_api(line: ProjectedLine) -> Dict[str, Any]:
    return {
        "component_code": line.component_code,
        "description": line.description,
        "quantity": line.quantity,
        "planned_quantity": line.planned_quantity,
        "unit_cost": line.unit_cost,
        "planned_cost": line.planned_cost,
    }


def projection_to_api(projection: ProductionProjection) -> Dict[str, Any]:
    """Order-record shape: bom_items / bom_totals plus the pricing overlay."""
    return {
        "quantity_planned": projection.quantity_planned,
        "bom_items": [projected_line_to_api(line) for line in projection.lines],
        "bom_totals": {
            "total_quantity": projection.total_quantity,
            "total_cost": projection.total_raw_material_cost,
        },
        "base_unit_material_cost": projection.base_unit_material_cost,
        "packaging_unit_cost": projection.packaging_unit_cost,
        "labor_per_unit": projection.labor_per_unit,
        "production_unit_cost": projection.production_unit_cost,
        "total_with_extras": projection.total_with_extras,
        "price_driver": projection.price_driver.value,
        "sale_price": projection.sale_price,
        "markup": projection.markup,
        "post_sale_tax": projection.post_sale_tax,
        "revenue_total": projection.revenue_total,
        "post_sale_tax_value": projection.post_sale_tax_value,
        "net_revenue_total": projection.net_revenue_total,
        "profit_total": projection.profit_total,
    }
