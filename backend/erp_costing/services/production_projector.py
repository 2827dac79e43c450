"""
Production Order Cost Projector — prices an OP (ordem de produção) from its BOM.

Covers:
  - Re-scaling BOM lines to the planned quantity (line quantity is a
    per-unit coefficient of the finished product)
  - Unit cost decomposition: raw material + packaging boxes + extra labor
  - Sale price <-> markup derivation, driven by whichever field was edited last
  - Revenue, post-sale tax, net revenue and profit for the whole order

A non-positive planned quantity yields an empty order: every per-unit and lot
figure is 0, never inf or NaN.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from erp_costing.services.bom_calculator import BomLine

logger = logging.getLogger("erp-costing-projection")


class PriceDriver(str, Enum):
    """The pricing field the user typed into last; it drives the other one."""
    MARKUP = "markup"
    SALE_PRICE = "sale_price"


@dataclass(frozen=True)
class ProductionOrderCostInputs:
    quantity_planned: float
    boxes_qty: float = 0.0
    box_cost: float = 0.0
    labor_per_unit: float = 0.0
    sale_price: float = 0.0
    markup: float = 0.0             # %
    post_sale_tax: float = 0.0      # %


@dataclass(frozen=True)
class ProjectedLine:
    component_code: str
    description: Optional[str]
    quantity: float                 # per unit of finished product
    unit_cost: float
    planned_quantity: float
    planned_cost: float


@dataclass(frozen=True)
class ProductionProjection:
    lines: List[ProjectedLine]
    quantity_planned: float
    total_quantity: float
    total_raw_material_cost: float
    base_unit_material_cost: float
    packaging_unit_cost: float
    labor_per_unit: float
    production_unit_cost: float
    total_with_extras: float
    price_driver: PriceDriver
    sale_price: float
    markup: float
    post_sale_tax: float
    revenue_total: float
    post_sale_tax_value: float
    net_revenue_total: float
    profit_total: float


def _per_unit(amount: float, quantity: float) -> float:
    return amount / quantity if quantity > 0 else 0.0


def derive_sale_price(unit_cost: float, markup: float) -> float:
    """sale_price = unit_cost × (1 + markup/100)."""
    return unit_cost * (1 + markup / 100)


def derive_markup(unit_cost: float, sale_price: float) -> float:
    """markup % = (sale_price − unit_cost) / unit_cost × 100; 0 when there is no cost."""
    if unit_cost <= 0:
        return 0.0
    return ((sale_price - unit_cost) / unit_cost) * 100


def project_lines(lines: Iterable[BomLine], quantity_planned: float) -> List[ProjectedLine]:
    """Scale each BOM line to the order. Non-positive quantities plan nothing."""
    qty = quantity_planned if quantity_planned > 0 else 0.0
    projected = []
    for line in lines:
        planned_quantity = line.quantity * qty
        projected.append(ProjectedLine(
            component_code=line.component_code,
            description=line.description,
            quantity=line.quantity,
            unit_cost=line.unit_cost,
            planned_quantity=planned_quantity,
            planned_cost=planned_quantity * line.unit_cost,
        ))
    return projected


def compute_production_projection(
    lines: Iterable[BomLine],
    inputs: ProductionOrderCostInputs,
    driver: PriceDriver = PriceDriver.MARKUP,
) -> ProductionProjection:
    """
    Project the BOM onto a production order and price it.

    Only the field not named by ``driver`` is derived; the driving field is
    passed through untouched, so re-deriving from the result reproduces the
    original input.
    """
    driver = PriceDriver(driver)
    qty = inputs.quantity_planned if inputs.quantity_planned > 0 else 0.0
    if qty == 0.0:
        logger.debug("Non-positive planned quantity %r: projecting an empty order", inputs.quantity_planned)

    projected = project_lines(lines, qty)
    total_quantity = sum((p.planned_quantity for p in projected), 0.0)
    total_raw_material_cost = sum((p.planned_cost for p in projected), 0.0)

    base_unit_material_cost = _per_unit(total_raw_material_cost, qty)
    packaging_unit_cost = _per_unit(inputs.boxes_qty * inputs.box_cost, qty)
    if qty > 0:
        production_unit_cost = base_unit_material_cost + packaging_unit_cost + inputs.labor_per_unit
    else:
        production_unit_cost = 0.0
    total_with_extras = production_unit_cost * qty

    if driver is PriceDriver.MARKUP:
        markup = inputs.markup
        sale_price = derive_sale_price(production_unit_cost, markup)
    else:
        sale_price = inputs.sale_price
        markup = derive_markup(production_unit_cost, sale_price)

    revenue_total = sale_price * qty
    post_sale_tax_value = revenue_total * (inputs.post_sale_tax / 100)
    net_revenue_total = revenue_total - post_sale_tax_value
    profit_total = revenue_total - (total_with_extras + post_sale_tax_value)

    logger.debug(
        "Projection qty=%s unit_cost=%.4f sale_price=%.4f markup=%.4f (driver=%s)",
        qty, production_unit_cost, sale_price, markup, driver.value,
    )
    return ProductionProjection(
        lines=projected,
        quantity_planned=inputs.quantity_planned,
        total_quantity=total_quantity,
        total_raw_material_cost=total_raw_material_cost,
        base_unit_material_cost=base_unit_material_cost,
        packaging_unit_cost=packaging_unit_cost,
        labor_per_unit=inputs.labor_per_unit,
        production_unit_cost=production_unit_cost,
        total_with_extras=total_with_extras,
        price_driver=driver,
        sale_price=sale_price,
        markup=markup,
        post_sale_tax=inputs.post_sale_tax,
        revenue_total=revenue_total,
        post_sale_tax_value=post_sale_tax_value,
        net_revenue_total=net_revenue_total,
        profit_total=profit_total,
    )
