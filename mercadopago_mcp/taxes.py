"""
Tax Calculator
==============
Simplified Brazilian tax estimates per state and product type.

The headline rate comes from the per-state table. The breakdown uses fixed
federal/municipal rates that do not depend on the state, so its sum is not
expected to match ``taxAmount``.
"""

from dataclasses import dataclass
from enum import Enum


class ProductType(str, Enum):
    PHYSICAL = "physical"
    DIGITAL = "digital"
    SERVICE = "service"


DEFAULT_REGION = "DEFAULT"

TAX_RATES: dict[str, dict[str, float]] = {
    "SP": {"physical": 0.18, "digital": 0.12, "service": 0.05},
    "RJ": {"physical": 0.20, "digital": 0.12, "service": 0.05},
    "MG": {"physical": 0.18, "digital": 0.12, "service": 0.05},
    "RS": {"physical": 0.17, "digital": 0.12, "service": 0.05},
    "PR": {"physical": 0.18, "digital": 0.12, "service": 0.05},
    "SC": {"physical": 0.17, "digital": 0.12, "service": 0.05},
    "BA": {"physical": 0.18, "digital": 0.12, "service": 0.05},
    "PE": {"physical": 0.18, "digital": 0.12, "service": 0.05},
    "CE": {"physical": 0.18, "digital": 0.12, "service": 0.05},
    DEFAULT_REGION: {"physical": 0.17, "digital": 0.12, "service": 0.05},
}

# Illustrative component rates, independent of the state table
ICMS_RATE = 0.12
PIS_RATE = 0.0165
COFINS_RATE = 0.076
ISS_RATE = 0.05


@dataclass
class TaxCalculation:
    base_amount: float
    region: str
    product_type: str
    tax_rate: float
    tax_amount: float
    total_amount: float
    breakdown: dict[str, float]

    def to_dict(self) -> dict:
        return {
            "calculation": {
                "baseAmount": self.base_amount,
                "region": self.region,
                "productType": self.product_type,
                "taxRate": self.tax_rate,
                "taxAmount": self.tax_amount,
                "totalAmount": self.total_amount,
            },
            "breakdown": dict(self.breakdown),
            "formatted": {
                "base": format_brl(self.base_amount),
                "tax": format_brl(self.tax_amount),
                "total": format_brl(self.total_amount),
            },
        }


def format_brl(amount: float) -> str:
    return f"R$ {amount:.2f}"


def resolve_rates(region: str) -> tuple[str, dict[str, float]]:
    """Return the normalized region code and its rate row, falling back to DEFAULT."""
    code = (region or DEFAULT_REGION).strip().upper()
    if code in TAX_RATES:
        return code, TAX_RATES[code]
    return code, TAX_RATES[DEFAULT_REGION]


def calculate_taxes(
    amount: float,
    region: str,
    product_type: ProductType = ProductType.PHYSICAL,
) -> TaxCalculation:
    """Compute tax, total and the fixed component breakdown for one amount."""
    product = ProductType(product_type)
    code, rates = resolve_rates(region)
    tax_rate = rates[product.value]

    tax_amount = round(amount * tax_rate, 2)
    total_amount = round(amount + tax_amount, 2)

    breakdown = {
        "ICMS": round(amount * ICMS_RATE, 2),
        "PIS": round(amount * PIS_RATE, 2),
        "COFINS": round(amount * COFINS_RATE, 2),
        "ISS": round(amount * ISS_RATE, 2) if product is ProductType.SERVICE else 0,
    }

    return TaxCalculation(
        base_amount=amount,
        region=code,
        product_type=product.value,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total_amount=total_amount,
        breakdown=breakdown,
    )
