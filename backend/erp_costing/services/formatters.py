"""Display formatting for cost figures (pt-BR conventions)."""
from typing import Dict, Optional

CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "US$",
    "EUR": "€",
}


def _group_pt_br(value: float, digits: int) -> str:
    # 1234567.891 -> "1.234.567,89"
    text = f"{abs(value):,.{digits}f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: float, currency: str = "BRL") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    body = f"{symbol} {_group_pt_br(value, 2)}"
    return f"-{body}" if round(value, 2) < 0 else body


def format_currency_or_dash(value: Optional[float], currency: str = "BRL") -> str:
    return format_currency(value, currency) if value is not None else "--"


def format_percent(value: float, digits: int = 2) -> str:
    body = f"{_group_pt_br(value, digits)}%"
    return f"-{body}" if round(value, digits) < 0 else body


def bom_summary_display(summary) -> Dict[str, str]:
    """Listing columns of a BOM as the dashboard prints them."""
    totals = summary.totals
    return {
        "ingredients": format_currency(totals.ingredients),
        "labor": format_currency(totals.labor),
        "packaging": format_currency(totals.packaging),
        "taxes": format_currency(totals.taxes),
        "overhead": format_currency(totals.overhead),
        "total_cost": format_currency(summary.total_cost),
        "unit_cost": format_currency(summary.unit_cost),
        "margin_achieved": format_percent(summary.margin_achieved),
    }


def projection_display(projection) -> Dict[str, str]:
    """Pricing panel of a production order."""
    return {
        "production_unit_cost": format_currency(projection.production_unit_cost),
        "total_with_extras": format_currency(projection.total_with_extras),
        "sale_price": format_currency(projection.sale_price),
        "markup": format_percent(projection.markup),
        "revenue_total": format_currency(projection.revenue_total),
        "post_sale_tax_value": format_currency(projection.post_sale_tax_value),
        "net_revenue_total": format_currency(projection.net_revenue_total),
        "profit_total": format_currency(projection.profit_total),
    }
