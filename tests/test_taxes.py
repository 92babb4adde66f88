"""Unit tests for the tax calculator"""

import pytest

from mercadopago_mcp.taxes import ProductType, calculate_taxes, format_brl, resolve_rates


def test_sao_paulo_physical_goods():
    result = calculate_taxes(100, "SP", ProductType.PHYSICAL)

    assert result.tax_rate == 0.18
    assert result.tax_amount == 18.0
    assert result.total_amount == 118.0


@pytest.mark.parametrize("region,product_type,rate", [
    ("RJ", "physical", 0.20),
    ("RS", "physical", 0.17),
    ("MG", "digital", 0.12),
    ("CE", "service", 0.05),
])
def test_state_table_rates(region, product_type, rate):
    assert calculate_taxes(100, region, product_type).tax_rate == rate


def test_region_is_case_insensitive():
    assert calculate_taxes(100, "sp").to_dict()["calculation"]["region"] == "SP"
    assert calculate_taxes(100, "sp").tax_rate == 0.18


def test_unknown_region_uses_default_rates():
    code, rates = resolve_rates("am")

    assert code == "AM"
    assert rates["physical"] == 0.17
    assert calculate_taxes(100, "AM").tax_amount == 17.0


def test_amounts_are_rounded_to_cents():
    result = calculate_taxes(33.33, "SP")

    assert result.tax_amount == 6.0
    assert result.total_amount == 39.33


def test_breakdown_uses_fixed_rates_and_iss_only_for_services():
    goods = calculate_taxes(100, "RJ", "physical").breakdown
    service = calculate_taxes(100, "RJ", "service").breakdown

    assert goods == {"ICMS": 12.0, "PIS": 1.65, "COFINS": 7.6, "ISS": 0}
    assert service["ISS"] == 5.0


def test_breakdown_is_not_reconciled_with_tax_amount():
    result = calculate_taxes(100, "RJ", "physical")

    assert sum(result.breakdown.values()) != result.tax_amount


def test_formatted_block():
    formatted = calculate_taxes(100, "SP").to_dict()["formatted"]

    assert formatted == {"base": "R$ 100.00", "tax": "R$ 18.00", "total": "R$ 118.00"}
    assert format_brl(5) == "R$ 5.00"


def test_unknown_product_type_is_rejected():
    with pytest.raises(ValueError):
        calculate_taxes(100, "SP", "luxury")
