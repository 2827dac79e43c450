"""
conftest.py — Shared pytest fixtures for the production costing test suite.

No database or external service fixtures are defined here. All tests in this
suite are pure unit tests that exercise the calculators in isolation, plus
API tests against the in-process FastAPI app.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``erp_costing.*`` imports resolve correctly regardless of where pytest
    is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any app imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# BOM fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def scenario_a_bom():
    """
    Two-line BOM priced against a 10-unit lot.

      ingredients = 2×5 + 1×10 = 20
      total       = 20 × 1.35  = 27
      unit        = 27 / 10    = 2.7
    """
    from erp_costing.services.bom_calculator import BomDefinition, BomLine
    return BomDefinition(
        product_code="PAO-FRANCES",
        version="1.0",
        lot_size=10,
        validity_days=30,
        margin_target=0.0,
        items=[
            BomLine(component_code="FARINHA", description="Farinha de trigo", quantity=2, unit_cost=5),
            BomLine(component_code="FERMENTO", description="Fermento biologico", quantity=1, unit_cost=10),
        ],
    )


@pytest.fixture
def bom_api_record():
    """A BOM exactly as GET /production/bom/{id} returns it (loose types included)."""
    return {
        "id": "b7f1c2",
        "product_code": "BOLO-CHOC",
        "version": "2.1",
        "lot_size": "50",
        "validity_days": 15,
        "margin_target": "3,5",
        "margin_achieved": 0,
        "notes": "Assar a 180C",
        "items": [
            {"component_code": "CACAU", "description": "Cacau 50%", "quantity": 4, "unit_cost": "12.5"},
            {"component_code": "ACUCAR", "quantity": 10, "unit_cost": 3},
        ],
        "created_at": "2026-10-01T10:00:00Z",
    }


# ---------------------------------------------------------------------------
# Production order fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def order_lines():
    """
    Per-unit coefficients of a finished product:
      0.5 × 4.00 = 2.00 raw material per unit
      0.1 × 10.0 = 1.00 raw material per unit
    """
    from erp_costing.services.bom_calculator import BomLine
    return [
        BomLine(component_code="MP-001", description="Base", quantity=0.5, unit_cost=4.0),
        BomLine(component_code="MP-002", description="Cobertura", quantity=0.1, unit_cost=10.0),
    ]


@pytest.fixture
def order_inputs():
    """100 units, 10 boxes at 1.50, 0.35 labor per unit, 50% markup, 10% post-sale tax."""
    from erp_costing.services.production_projector import ProductionOrderCostInputs
    return ProductionOrderCostInputs(
        quantity_planned=100,
        boxes_qty=10,
        box_cost=1.5,
        labor_per_unit=0.35,
        sale_price=0.0,
        markup=50.0,
        post_sale_tax=10.0,
    )


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def api_client():
    """TestClient bound to the in-process FastAPI app (no network)."""
    from fastapi.testclient import TestClient
    from erp_costing.main import app
    return TestClient(app)
