"""
Accounts Receivable Service (``ledger_modules.ar.service``).

Responsibility
--------------
Customer invoices, invoice payments and the payment-reminder sweep.

Invariants enforced
-------------------
* Period lock is checked first by every mutating operation.
* Payments clamp to the remaining ``balance_due``; status becomes ``paid``
  at zero and ``partial`` otherwise.
* The reminder sweep skips invoices whose customer cannot be resolved and
  carries on with the rest.

Failure modes
-------------
* ``PeriodLockedError``, ``RecordNotFoundError``, ``InvalidPaymentError``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.store import CollectionStore
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.events import InvoicePaid
from ledger_kernel.domain.values import ZERO, money
from ledger_kernel.exceptions import (
    InvalidPaymentError,
    RecordNotFoundError,
    UnresolvedCustomerError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.period_guard import PeriodLockGuard
from ledger_modules._helpers import publish_event, unit_of_work
from ledger_modules.ar.models import (
    CustomerContact,
    CustomerDirectory,
    Invoice,
    InvoiceStatus,
    ReminderSender,
)
from ledger_modules.ar.orm import InvoiceModel, InvoicePaymentModel

logger = get_logger("modules.ar.service")


class ReceivablesService:
    """Transaction boundary: commits on success, rolls back on failure."""

    def __init__(
        self,
        session: Session,
        bus: EventBus,
        period_guard: PeriodLockGuard,
        clock: Clock | None = None,
    ):
        self._session = session
        self._bus = bus
        self._guard = period_guard
        self._clock = clock or SystemClock()
        self._invoices = CollectionStore(session, InvoiceModel)

    def create_invoice(
        self,
        number: str,
        amount: Decimal,
        invoice_date: date,
        due_date: date,
        customer_name: str = "",
        tax_amount: Decimal = ZERO,
        order_id: str | None = None,
    ) -> Invoice:
        self._guard.assert_unlocked(invoice_date)
        amount = money(amount)
        if amount <= 0:
            raise ValueError(f"Invoice amount must be positive, got {amount}")

        with unit_of_work(self._session):
            invoice = InvoiceModel(
                number=number,
                customer_name=customer_name,
                order_id=order_id,
                invoice_date=invoice_date,
                due_date=due_date,
                amount=amount,
                tax_amount=money(tax_amount),
                balance_due=amount,
                status=InvoiceStatus.OPEN.value,
            )
            self._invoices.add(invoice)

        logger.info("invoice_created", extra={"invoice_number": number, "amount": str(amount)})
        return invoice.to_dto()

    def save_invoice(self, invoice: Invoice) -> Invoice:
        """Insert or replace an invoice record; guarded on its date."""
        self._guard.assert_unlocked(invoice.invoice_date)
        with unit_of_work(self._session):
            row = self._invoices.upsert(invoice.id, **InvoiceModel.values_from_dto(invoice))
        logger.info("invoice_saved", extra={"invoice_number": invoice.number})
        return row.to_dto()

    def get_invoice(self, invoice_id: UUID) -> Invoice:
        return self._get_invoice(invoice_id).to_dto()

    def list_invoices(self, status: InvoiceStatus | None = None) -> list[Invoice]:
        query = select(InvoiceModel).order_by(InvoiceModel.invoice_date, InvoiceModel.number)
        if status is not None:
            query = query.where(InvoiceModel.status == status.value)
        return [i.to_dto() for i in self._session.scalars(query)]

    def record_invoice_payment(
        self,
        invoice_id: UUID,
        amount: Decimal,
        method: str = "bank",
        payment_date: date | None = None,
    ) -> Invoice:
        payment_date = payment_date or self._clock.today()
        self._guard.assert_unlocked(payment_date)
        amount = money(amount)

        with unit_of_work(self._session):
            invoice = self._get_invoice(invoice_id)
            if invoice.status == InvoiceStatus.PAID.value or invoice.balance_due <= 0:
                raise InvalidPaymentError(str(invoice_id), amount, "invoice is already paid")
            if amount <= 0:
                raise InvalidPaymentError(str(invoice_id), amount, "payment must be positive")

            paid = min(amount, money(invoice.balance_due))
            invoice.payments.append(
                InvoicePaymentModel(payment_date=payment_date, amount=paid, method=method)
            )
            invoice.balance_due = money(invoice.balance_due) - paid
            invoice.status = (
                InvoiceStatus.PAID if invoice.balance_due == 0 else InvoiceStatus.PARTIAL
            ).value
            self._session.flush()

            publish_event(
                self._bus,
                InvoicePaid(
                    invoice_id=invoice.number,
                    payment_date=payment_date,
                    amount=paid,
                    method=method,
                ),
            )

        logger.info(
            "invoice_payment_recorded",
            extra={
                "invoice_number": invoice.number,
                "paid": str(paid),
                "balance_due": str(invoice.balance_due),
                "status": invoice.status,
            },
        )
        return invoice.to_dto()

    def send_batch_payment_reminders(
        self,
        directory: CustomerDirectory,
        sender: ReminderSender,
    ) -> int:
        """
        Send one reminder per outstanding invoice whose customer resolves.

        Returns:
            Number of reminders sent.
        """
        sent = 0
        with unit_of_work(self._session):
            query = (
                select(InvoiceModel)
                .where(InvoiceModel.balance_due > 0)
                .where(InvoiceModel.status != InvoiceStatus.PAID.value)
                .order_by(InvoiceModel.invoice_date, InvoiceModel.number)
            )
            for invoice in self._session.scalars(query).all():
                dto = invoice.to_dto()
                try:
                    customer = self._resolve_customer(directory, dto)
                except UnresolvedCustomerError:
                    logger.info(
                        "payment_reminder_skipped",
                        extra={"invoice_number": dto.number, "reason": "unresolved_customer"},
                    )
                    continue
                sender.send_payment_reminder(dto, customer)
                invoice.last_payment_reminder = self._clock.now()
                sent += 1
            self._session.flush()

        logger.info("payment_reminders_sent", extra={"sent": sent})
        return sent

    @staticmethod
    def _resolve_customer(directory: CustomerDirectory, invoice: Invoice) -> CustomerContact:
        customer = directory.find_customer_for_invoice(invoice)
        if customer is None:
            raise UnresolvedCustomerError(invoice.number)
        return customer

    def _get_invoice(self, invoice_id: UUID) -> InvoiceModel:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            raise RecordNotFoundError("invoices", str(invoice_id))
        return invoice
