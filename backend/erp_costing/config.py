"""
Costing configuration — single source of truth for cost-policy ratios,
field limits and service settings.

Import from here in the calculators, the mapping layer and the API rather
than hardcoding values.
"""
from __future__ import annotations

import os

# ── Fixed-ratio overhead model (fractions of ingredient cost) ─────────────────
# Policy constants, not request inputs. Moving them to tenant settings only
# requires changing where these names are read from.
LABOR_RATIO: float = 0.12
PACKAGING_RATIO: float = 0.08
TAX_RATIO: float = 0.10
OVERHEAD_RATIO: float = 0.05

# Smallest divisor used when spreading a lot total over its units
MIN_LOT_SIZE: float = 1.0


# ── Field limits (form layer / API models) ────────────────────────────────────
MAX_COMPONENT_CODE_LENGTH: int = 80
NOTES_MAX_LENGTH: int = 2000
DEFAULT_BOM_VERSION: str = "1.0"


# ── Order preview placeholder ─────────────────────────────────────────────────
# Used to draft an order preview when no reference BOM exists for the product.
PREVIEW_PLACEHOLDER_PRODUCT: str = "PROD"
PREVIEW_PLACEHOLDER_COMPONENT: str = "ING-001"
PREVIEW_PLACEHOLDER_DESCRIPTION: str = "Materia base"
PREVIEW_PLACEHOLDER_UNIT_COST: float = 2.0
PREVIEW_PLACEHOLDER_VALIDITY_DAYS: int = 30
PREVIEW_PLACEHOLDER_MARGIN_TARGET: float = 10.0


# ── Service settings (environment) ────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"

_cors_default = "http://localhost:3000,http://localhost:8000"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()
]

API_VERSION: str = "1.0.0"
