"""
Form Validation

DESIGN DECISION: Screens hand us raw strings exactly as typed.
Validation turns them into typed values before anything reaches the
record store, and reports every problem at once instead of stopping
at the first.

Rules:
- Required text fields must be non-blank after trimming
- Decimals accept either "." or "," as the separator ("12,50")
- Stock quantity is a whole number greater than zero
- Unit price is zero or more; ledger and billing amounts are more than zero
- Only income and expense entries may be typed in by hand; receivables
  come from service billing

IMPORTANT: Validation NEVER silently fixes values beyond trimming and
decimal-separator normalization.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from autoshop.models.records import (
    FinancialKind,
    ValidationIssue,
    ValidationResult,
)


def parse_decimal(raw: str) -> Optional[Decimal]:
    """Parse a user-typed decimal, accepting a comma separator."""
    text = (raw or "").strip().replace(",", ".")
    if not text:
        return None
    try:
        value = Decimal(text)
        if not value.is_finite():
            return None
        return value.quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def parse_int(raw: str) -> Optional[int]:
    text = (raw or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


class FormValidator:
    """
    Validates raw form input for each record type.

    Every method returns a ValidationResult whose ``cleaned`` dict can be
    passed straight to the matching collection's ``add``.
    """

    def _require(
        self,
        result: ValidationResult,
        field: str,
        raw: Optional[str],
        label: str,
    ) -> None:
        value = (raw or "").strip()
        if not value:
            result.issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
            return
        result.cleaned[field] = value

    def _amount(
        self,
        result: ValidationResult,
        field: str,
        raw: Optional[str],
        label: str,
        allow_zero: bool = False,
    ) -> None:
        if not (raw or "").strip():
            result.issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
            return

        value = parse_decimal(raw)
        if value is None:
            result.issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_number",
                message=f"{label} must be a number",
            ))
        elif value < 0 or (value == 0 and not allow_zero):
            bound = "zero or more" if allow_zero else "greater than zero"
            result.issues.append(ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{label} must be {bound}",
            ))
        else:
            result.cleaned[field] = value

    def validate_client(
        self,
        name: str,
        phone: str,
        address: str = "",
    ) -> ValidationResult:
        """Name and phone are required; address is optional."""
        result = ValidationResult(form="client")
        self._require(result, "name", name, "Name")
        self._require(result, "phone", phone, "Phone")
        result.cleaned["address"] = (address or "").strip()
        return result

    def validate_service(
        self,
        client_name: str,
        car: str,
        plate: str,
        model: str,
        year: str,
        billing_amount: str = "",
    ) -> ValidationResult:
        """
        All vehicle fields are required.

        ``billing_amount`` is optional; when given it must be a positive
        number and ends up in ``cleaned["billing_amount"]``.
        """
        result = ValidationResult(form="service")
        self._require(result, "client_name", client_name, "Client name")
        self._require(result, "car", car, "Car")
        self._require(result, "plate", plate, "Plate")
        self._require(result, "model", model, "Model")
        self._require(result, "year", year, "Year")

        if "year" in result.cleaned and parse_int(result.cleaned["year"]) is None:
            result.issues.append(ValidationIssue(
                field="year",
                issue_type="invalid_number",
                message="Year should be a number",
                severity="warning",
            ))

        if (billing_amount or "").strip():
            self._amount(result, "billing_amount", billing_amount, "Service amount")
        return result

    def validate_stock_item(
        self,
        name: str,
        quantity: str,
        unit_price: str,
    ) -> ValidationResult:
        result = ValidationResult(form="stock_item")
        self._require(result, "name", name, "Item name")

        if not (quantity or "").strip():
            result.issues.append(ValidationIssue(
                field="quantity",
                issue_type="missing",
                message="Quantity is required",
            ))
        else:
            parsed = parse_int(quantity)
            if parsed is None or parsed <= 0:
                result.issues.append(ValidationIssue(
                    field="quantity",
                    issue_type="out_of_range",
                    message="Quantity must be a whole number greater than zero",
                ))
            else:
                result.cleaned["quantity"] = parsed

        self._amount(result, "unit_price", unit_price, "Unit price", allow_zero=True)
        return result

    def validate_financial_record(
        self,
        kind: Union[FinancialKind, str],
        description: str,
        amount: str,
    ) -> ValidationResult:
        """Manual ledger entries: income or expense only."""
        result = ValidationResult(form="financial_record")

        try:
            parsed_kind = FinancialKind(kind)
        except ValueError:
            parsed_kind = None
        if parsed_kind not in (FinancialKind.INCOME, FinancialKind.EXPENSE):
            result.issues.append(ValidationIssue(
                field="kind",
                issue_type="invalid_value",
                message="Entry type must be income or expense",
            ))
        else:
            result.cleaned["kind"] = parsed_kind

        self._require(result, "description", description, "Description")
        self._amount(result, "amount", amount, "Amount")
        return result

    def validate_appointment(
        self,
        client_name: str,
        scheduled_at: Optional[datetime],
        description: str,
    ) -> ValidationResult:
        result = ValidationResult(form="appointment")
        self._require(result, "client_name", client_name, "Client name")
        self._require(result, "description", description, "Description")

        if scheduled_at is None:
            result.issues.append(ValidationIssue(
                field="scheduled_at",
                issue_type="missing",
                message="Date and time are required",
            ))
        else:
            result.cleaned["scheduled_at"] = scheduled_at
        return result
