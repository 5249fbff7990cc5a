"""
Ledger Queries

DESIGN DECISION: Totals are always computed from what is actually stored.
Nothing is cached, so the numbers shown match the collections exactly.

The one rule that matters here: a pending service receivable is money
owed, not money earned. It is reported separately and never added to
income. When it is received, the income record appended at that moment
is what counts, so counting the received receivable as well would be
double-counting.
"""

from decimal import Decimal

from autoshop.models.records import (
    Appointment,
    FinancialKind,
    FinancialRecord,
    FinancialSummary,
    ReceivableStatus,
)
from autoshop.store import RecordStore


class LedgerQueries:
    """
    Read-only views over the record store.

    Display orderings live here; the store itself always returns
    insertion order.
    """

    def __init__(self, store: RecordStore):
        self._store = store

    async def financial_summary(self) -> FinancialSummary:
        """Income, expense, and outstanding receivable totals."""
        summary = FinancialSummary()

        for record in await self._store.financial_records.list():
            if record.kind == FinancialKind.INCOME:
                summary.total_income += record.amount
            elif record.kind == FinancialKind.EXPENSE:
                summary.total_expense += record.amount
            elif record.status == ReceivableStatus.PENDING:
                summary.pending_receivables_total += record.amount
                summary.pending_receivables_count += 1
            else:
                summary.received_receivables_count += 1

        return summary

    async def pending_receivables(self) -> list[FinancialRecord]:
        """Receivables still awaiting payment, oldest first."""
        records = await self._store.financial_records.list()
        return [record for record in records if record.is_pending]

    async def financial_records_newest_first(self) -> list[FinancialRecord]:
        records = await self._store.financial_records.list()
        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    async def appointments_by_schedule(self) -> list[Appointment]:
        """Appointments ordered by scheduled time, soonest first."""
        appointments = await self._store.appointments.list()
        return sorted(appointments, key=lambda a: a.scheduled_at)

    async def stock_valuation(self) -> Decimal:
        """Total value of stock on hand (quantity x unit price)."""
        items = await self._store.stock_items.list()
        return sum((item.total_value for item in items), Decimal("0"))
