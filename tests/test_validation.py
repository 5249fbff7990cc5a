"""
Tests for form validation of raw screen input.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from autoshop.models.records import FinancialKind
from autoshop.validation import FormValidator, parse_decimal, parse_int


@pytest.fixture
def validator():
    return FormValidator()


class TestParsing:

    @pytest.mark.parametrize("raw, expected", [
        ("12,50", Decimal("12.50")),
        ("12.5", Decimal("12.50")),
        (" 200 ", Decimal("200.00")),
        ("-3", Decimal("-3.00")),
    ])
    def test_parse_decimal(self, raw, expected):
        assert parse_decimal(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "1,2,3", "NaN", "Infinity"])
    def test_parse_decimal_rejects(self, raw):
        assert parse_decimal(raw) is None

    def test_parse_int(self):
        assert parse_int(" 7 ") == 7
        assert parse_int("7.5") is None
        assert parse_int("") is None


class TestClientForm:

    def test_valid_client(self, validator):
        result = validator.validate_client("  Maria ", "51999999999")
        assert result.is_valid
        assert result.cleaned == {"name": "Maria", "phone": "51999999999", "address": ""}

    def test_name_and_phone_required(self, validator):
        result = validator.validate_client("", "  ", "Rua A")
        assert not result.is_valid
        assert {issue.field for issue in result.issues} == {"name", "phone"}


class TestServiceForm:

    def test_valid_service_with_billing(self, validator):
        result = validator.validate_service("Maria", "Fiat Palio", "ABC1234", "ELX", "2010", "200,00")
        assert result.is_valid
        assert result.cleaned["billing_amount"] == Decimal("200.00")
        assert result.cleaned["plate"] == "ABC1234"

    def test_billing_is_optional(self, validator):
        result = validator.validate_service("Maria", "Fiat Palio", "ABC1234", "ELX", "2010")
        assert result.is_valid
        assert "billing_amount" not in result.cleaned

    def test_billing_must_be_positive(self, validator):
        result = validator.validate_service("Maria", "Fiat Palio", "ABC1234", "ELX", "2010", "0")
        assert not result.is_valid
        assert result.issues[0].field == "billing_amount"

    def test_all_vehicle_fields_required(self, validator):
        result = validator.validate_service("", "", "", "", "")
        assert result.error_count == 5

    def test_non_numeric_year_is_only_a_warning(self, validator):
        result = validator.validate_service("Maria", "Fiat Palio", "ABC1234", "ELX", "2010/11")
        assert result.is_valid
        assert result.issues[0].severity == "warning"


class TestStockForm:

    def test_valid_stock_item(self, validator):
        result = validator.validate_stock_item("Oil filter", "3", "19,90")
        assert result.is_valid
        assert result.cleaned == {
            "name": "Oil filter",
            "quantity": 3,
            "unit_price": Decimal("19.90"),
        }

    @pytest.mark.parametrize("quantity", ["0", "-2", "1.5", "many"])
    def test_quantity_must_be_positive_integer(self, validator, quantity):
        result = validator.validate_stock_item("Oil filter", quantity, "10")
        assert not result.is_valid
        assert result.issues[0].field == "quantity"

    def test_free_items_are_allowed(self, validator):
        result = validator.validate_stock_item("Sample", "1", "0")
        assert result.is_valid
        assert result.cleaned["unit_price"] == Decimal("0.00")

    def test_negative_price_rejected(self, validator):
        result = validator.validate_stock_item("Oil filter", "1", "-1")
        assert result.issues[0].issue_type == "out_of_range"


class TestFinancialForm:

    def test_valid_expense(self, validator):
        result = validator.validate_financial_record("expense", "Rent", "900")
        assert result.is_valid
        assert result.cleaned["kind"] == FinancialKind.EXPENSE

    def test_receivables_cannot_be_typed_in(self, validator):
        result = validator.validate_financial_record("serviceReceivable", "Job", "100")
        assert not result.is_valid
        assert result.issues[0].field == "kind"

    def test_amount_must_be_positive(self, validator):
        result = validator.validate_financial_record("income", "Sale", "0,00")
        assert not result.is_valid


class TestAppointmentForm:

    def test_valid_appointment(self, validator):
        when = datetime(2025, 3, 1, 9, 30)
        result = validator.validate_appointment("Maria", when, "Brake check")
        assert result.is_valid
        assert result.cleaned["scheduled_at"] == when

    def test_missing_fields(self, validator):
        result = validator.validate_appointment(" ", None, "")
        assert result.error_count == 3


class TestCleanedValuesFeedTheStore:

    @pytest.mark.asyncio
    async def test_cleaned_stock_item_is_accepted(self, validator, store):
        result = validator.validate_stock_item("Oil filter", "3", "19,90")
        saved = await store.stock_items.add(**result.cleaned)
        assert saved.success


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
