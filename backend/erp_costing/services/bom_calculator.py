"""
BOM Total Calculator — cost breakdown for a ficha técnica (bill of materials).

Given a BOM definition (component lines with quantity and unit cost) the
calculator derives:
  - ingredient cost (Σ quantity × unit cost)
  - labor / packaging / taxes / overhead as fixed ratios of ingredient cost
  - lot total and unit cost (lot total spread over the lot size, min 1)
  - achieved margin against the target unit cost

Totals are recomputed from the current lines on every call and never patched
incrementally. Numeric inputs are taken as-is: NaN propagates as NaN, the
mapping layer is where malformed values are rejected.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from erp_costing.config import (
    DEFAULT_BOM_VERSION,
    LABOR_RATIO,
    MIN_LOT_SIZE,
    OVERHEAD_RATIO,
    PACKAGING_RATIO,
    PREVIEW_PLACEHOLDER_COMPONENT,
    PREVIEW_PLACEHOLDER_DESCRIPTION,
    PREVIEW_PLACEHOLDER_MARGIN_TARGET,
    PREVIEW_PLACEHOLDER_PRODUCT,
    PREVIEW_PLACEHOLDER_UNIT_COST,
    PREVIEW_PLACEHOLDER_VALIDITY_DAYS,
    TAX_RATIO,
)

logger = logging.getLogger("erp-costing-bom")


@dataclass(frozen=True)
class BomLine:
    component_code: str
    quantity: float
    unit_cost: float
    description: Optional[str] = None

    @property
    def line_cost(self) -> float:
        return self.quantity * self.unit_cost


@dataclass
class BomDefinition:
    product_code: str
    version: str = DEFAULT_BOM_VERSION
    lot_size: float = 0.0
    validity_days: int = 0
    margin_target: float = 0.0
    margin_achieved: float = 0.0
    items: List[BomLine] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass(frozen=True)
class BomTotals:
    ingredients: float
    labor: float
    packaging: float
    taxes: float
    overhead: float
    total: float
    unit: float
    margin_achieved: float


@dataclass(frozen=True)
class BomSummary:
    """A BOM as shown in listings: stored fields plus derived cost figures."""
    bom: BomDefinition
    totals: BomTotals
    total_cost: float
    unit_cost: float
    margin_achieved: float


def effective_lot_size(lot_size: float) -> float:
    """Divisor used for unit cost. Anything below 1 (including NaN) counts as 1."""
    return lot_size if lot_size >= MIN_LOT_SIZE else MIN_LOT_SIZE


def compute_bom_totals(bom: BomDefinition) -> BomTotals:
    """
    Compute the cost breakdown of a BOM.

    margin_achieved is ((margin_target - unit) / margin_target) * 100, i.e. how
    far the unit cost sits below (positive) or above (negative) the target
    cost. It is not a sales margin over revenue; the name is kept as-is.
    """
    ingredients = sum((item.line_cost for item in bom.items), 0.0)
    labor = ingredients * LABOR_RATIO
    packaging = ingredients * PACKAGING_RATIO
    taxes = ingredients * TAX_RATIO
    overhead = ingredients * OVERHEAD_RATIO
    total = ingredients + labor + packaging + taxes + overhead
    unit = total / effective_lot_size(bom.lot_size)

    if bom.margin_target > 0:
        margin_achieved = ((bom.margin_target - unit) / bom.margin_target) * 100
    else:
        margin_achieved = 0.0

    logger.debug(
        "BOM %s v%s: %d lines, ingredients=%.4f total=%.4f unit=%.4f",
        bom.product_code, bom.version, len(bom.items), ingredients, total, unit,
    )
    return BomTotals(
        ingredients=ingredients,
        labor=labor,
        packaging=packaging,
        taxes=taxes,
        overhead=overhead,
        total=total,
        unit=unit,
        margin_achieved=margin_achieved,
    )


def summarize_bom(bom: BomDefinition) -> BomSummary:
    """Totals plus listing figures. A stored non-zero achieved margin wins over the derived one."""
    totals = compute_bom_totals(bom)
    return BomSummary(
        bom=bom,
        totals=totals,
        total_cost=totals.total,
        unit_cost=totals.unit,
        margin_achieved=bom.margin_achieved or totals.margin_achieved,
    )


def _placeholder_bom(product_code: str, quantity_planned: float) -> BomDefinition:
    qty = quantity_planned or 1
    return BomDefinition(
        product_code=product_code or PREVIEW_PLACEHOLDER_PRODUCT,
        lot_size=qty,
        validity_days=PREVIEW_PLACEHOLDER_VALIDITY_DAYS,
        margin_target=PREVIEW_PLACEHOLDER_MARGIN_TARGET,
        items=[
            BomLine(
                component_code=PREVIEW_PLACEHOLDER_COMPONENT,
                description=PREVIEW_PLACEHOLDER_DESCRIPTION,
                quantity=qty,
                unit_cost=PREVIEW_PLACEHOLDER_UNIT_COST,
            )
        ],
    )


def preview_order_totals(
    reference_bom: Optional[BomDefinition],
    quantity_planned: float,
    product_code: str = "",
) -> BomTotals:
    """
    Cost preview for an order being drafted.

    The reference BOM is recomputed with the planned quantity as its lot size
    (the BOM's own lot size is kept when the planned quantity is not positive).
    The dashboard form keeps a negative quantity as the lot size instead, which
    ends up as divisor 1.
    Without a reference BOM a single placeholder ingredient line is priced.
    """
    if reference_bom is None:
        return compute_bom_totals(_placeholder_bom(product_code, quantity_planned))

    lot_size = quantity_planned if quantity_planned > 0 else reference_bom.lot_size
    return compute_bom_totals(replace(reference_bom, lot_size=lot_size))
