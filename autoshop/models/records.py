"""
Core Record Models for the Auto Shop Record Store

These models define the strict schemas for every record persisted by the
record store. They are designed to:
1. Enforce field rules at construction time
2. Serialize to the camelCase JSON shape stored under each namespace
3. Carry the receivable state machine rules in one place

DESIGN DECISION: Identifiers are random UUID4 strings, never timestamps.
Two records created within the same clock tick must not collide.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


def new_record_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Every stored datetime is timezone-aware, so collections always sort
Timestamp = Annotated[datetime, AfterValidator(as_utc)]


# Decimals live in memory, JSON numbers live on disk
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CollectionName(str, Enum):
    """
    Namespace keys for the five record collections.

    Each namespace holds one JSON array of its collection's records.
    """
    CLIENTS = "clients"
    SERVICES = "services"
    STOCK_ITEMS = "stockItems"
    FINANCIAL_RECORDS = "financialRecords"
    APPOINTMENTS = "appointments"


class FinancialKind(str, Enum):
    """Kinds of ledger entries."""
    INCOME = "income"
    EXPENSE = "expense"
    SERVICE_RECEIVABLE = "serviceReceivable"


class ReceivableStatus(str, Enum):
    """
    Status of a service receivable.

    CRITICAL: The only forward transition is PENDING -> RECEIVED.
    RECEIVED is terminal.
    """
    PENDING = "pending"
    RECEIVED = "received"


class AppointmentStatus(str, Enum):
    """Appointment status. Any status may move to any other."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OperationStatus(str, Enum):
    """Outcome of a record store operation."""
    OK = "ok"
    NOT_FOUND = "not_found"        # Unknown id, a warning, not a fault
    INVALID = "invalid"            # Fields failed schema validation
    REJECTED = "rejected"          # Operation not allowed for this record
    STORAGE_FAULT = "storage_fault"


# =============================================================================
# STORED RECORDS
# =============================================================================

class StoredRecord(BaseModel):
    """
    Base shape shared by every persisted record: ``{id, ...fields}``.

    Fields are snake_case in Python and camelCase in storage.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        frozen=True,
        description="Unique record ID within its collection"
    )

    def to_storage_dict(self) -> dict[str, Any]:
        """Convert to the JSON-ready dict stored in the namespace array."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Client(StoredRecord):
    """A shop client."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Client name (required)"
    )
    phone: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Contact phone (required)"
    )
    address: str = Field(
        default="",
        max_length=500,
        description="Street address (optional)"
    )


class Service(StoredRecord):
    """
    A vehicle job registered at the shop.

    NOTE: client_name is free text. There is no foreign key to Client.
    """

    client_name: str = Field(..., min_length=1, max_length=200)
    car: str = Field(..., min_length=1, max_length=100)
    plate: str = Field(..., min_length=1, max_length=20)
    model: str = Field(..., min_length=1, max_length=100)
    year: str = Field(..., min_length=1, max_length=10)
    registration_timestamp: Timestamp = Field(default_factory=utc_now)

    def describe(self) -> str:
        """Short human-readable label used on ledger entries."""
        return f"{self.car} {self.model} ({self.plate}) - {self.client_name}"


class StockItem(StoredRecord):
    """A part or consumable held in stock."""

    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=0)
    unit_price: Money = Field(..., ge=0, decimal_places=2)
    entry_timestamp: Timestamp = Field(default_factory=utc_now)

    @property
    def total_value(self) -> Decimal:
        return self.unit_price * self.quantity


class FinancialRecord(StoredRecord):
    """
    A ledger entry.

    Receivable-only fields (status, service_id, payment_timestamp) are
    present exactly when kind is SERVICE_RECEIVABLE.
    """

    kind: FinancialKind
    description: str = Field(..., min_length=1, max_length=500)
    amount: Money = Field(..., gt=0, decimal_places=2)
    timestamp: Timestamp = Field(default_factory=utc_now)

    # Receivables only
    status: Optional[ReceivableStatus] = None
    service_id: Optional[str] = None
    payment_timestamp: Optional[Timestamp] = None

    @model_validator(mode='after')
    def validate_receivable_fields(self) -> 'FinancialRecord':
        """Keep receivable fields consistent with the record kind."""
        if self.kind != FinancialKind.SERVICE_RECEIVABLE:
            if (
                self.status is not None
                or self.service_id is not None
                or self.payment_timestamp is not None
            ):
                raise ValueError(
                    "Only service receivables carry status, serviceId or paymentTimestamp"
                )
            return self

        if self.status is None:
            self.status = ReceivableStatus.PENDING
        if not self.service_id:
            raise ValueError("Service receivables must reference a service")
        if self.status == ReceivableStatus.RECEIVED and self.payment_timestamp is None:
            raise ValueError("Received receivables must have a payment timestamp")
        if self.status == ReceivableStatus.PENDING and self.payment_timestamp is not None:
            raise ValueError("Pending receivables cannot have a payment timestamp")
        return self

    @property
    def is_receivable(self) -> bool:
        return self.kind == FinancialKind.SERVICE_RECEIVABLE

    @property
    def is_pending(self) -> bool:
        return self.is_receivable and self.status == ReceivableStatus.PENDING

    def mark_received(self, at: Optional[datetime] = None) -> 'FinancialRecord':
        """Return a validated copy of this receivable in RECEIVED state."""
        data = self.model_dump()
        data.update(
            status=ReceivableStatus.RECEIVED,
            payment_timestamp=at or utc_now(),
        )
        return FinancialRecord.model_validate(data)

    def to_income_record(self, at: Optional[datetime] = None) -> 'FinancialRecord':
        """Build the independent income entry that attributes this payment."""
        return FinancialRecord(
            kind=FinancialKind.INCOME,
            description=f"Payment received: {self.description}",
            amount=self.amount,
            timestamp=at or utc_now(),
        )


class Appointment(StoredRecord):
    """A scheduled visit."""

    client_name: str = Field(..., min_length=1, max_length=200)
    scheduled_at: Timestamp
    description: str = Field(..., min_length=1, max_length=500)
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING)


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class OperationResult(BaseModel):
    """
    Result of a record store operation.

    Operations never raise to the presentation layer. They resolve to one
    of these instead.
    """

    status: OperationStatus
    message: Optional[str] = None
    record_id: Optional[str] = Field(
        default=None,
        description="ID of the record created or affected"
    )
    related_ids: list[str] = Field(
        default_factory=list,
        description="IDs of records created as a side effect"
    )

    @property
    def success(self) -> bool:
        return self.status == OperationStatus.OK


class ServiceRegistrationResult(OperationResult):
    """Result of registering a service with optional billing."""

    receivable_id: Optional[str] = None
    compensated: bool = Field(
        default=False,
        description="True if the service was removed after billing failed"
    )


# =============================================================================
# LEDGER SUMMARY
# =============================================================================

class FinancialSummary(BaseModel):
    """
    Totals shown on the ledger screen.

    Pending receivables are NOT income. Once received, the income record
    appended at receipt time is what gets counted.
    """

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    pending_receivables_total: Decimal = Decimal("0")
    pending_receivables_count: int = Field(default=0, ge=0)
    received_receivables_count: int = Field(default=0, ge=0)

    @property
    def profit(self) -> Decimal:
        return self.total_income - self.total_expense


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found on a form."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_number', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
    )


class ValidationResult(BaseModel):
    """
    Result of validating one form submission.

    ``cleaned`` holds the parsed values, ready to pass to ``add``.
    """

    form: str
    issues: list[ValidationIssue] = Field(default_factory=list)
    cleaned: dict[str, Any] = Field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")
