"""
Accounts Receivable ORM Models (``ledger_modules.ar.orm``).

SQLAlchemy persistence for customer invoices and invoice payments.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_modules.ar.models import Invoice, InvoicePayment, InvoiceStatus


class InvoiceModel(TrackedBase):
    """
    ORM model for customer invoices.

    Guarantees:
        - number is unique (uq_ar_invoices_number).
        - balance_due changes only alongside the matching AR posting.
    """

    __tablename__ = "ar_invoices"

    __table_args__ = (
        UniqueConstraint("number", name="uq_ar_invoices_number"),
        Index("idx_ar_invoices_status", "status"),
    )

    number: Mapped[str] = mapped_column(String(100), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), default="")
    order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal]
    tax_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    balance_due: Mapped[Decimal]
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    last_payment_reminder: Mapped[datetime | None] = mapped_column(nullable=True)

    payments: Mapped[list["InvoicePaymentModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePaymentModel.payment_date",
    )

    def to_dto(self) -> Invoice:
        return Invoice(
            id=self.id,
            number=self.number,
            customer_name=self.customer_name,
            order_id=self.order_id,
            invoice_date=self.invoice_date,
            due_date=self.due_date,
            amount=self.amount,
            tax_amount=self.tax_amount,
            balance_due=self.balance_due,
            status=InvoiceStatus(self.status),
            last_payment_reminder=self.last_payment_reminder,
            payments=tuple(p.to_dto() for p in self.payments),
        )

    @staticmethod
    def values_from_dto(dto: Invoice) -> dict:
        """Editable column values of an Invoice DTO."""
        return {
            "number": dto.number,
            "customer_name": dto.customer_name,
            "order_id": dto.order_id,
            "invoice_date": dto.invoice_date,
            "due_date": dto.due_date,
            "amount": dto.amount,
            "tax_amount": dto.tax_amount,
            "balance_due": dto.balance_due,
            "status": dto.status.value,
            "last_payment_reminder": dto.last_payment_reminder,
        }

    def __repr__(self) -> str:
        return f"<InvoiceModel {self.number} {self.amount} {self.status}>"


class InvoicePaymentModel(TrackedBase):
    __tablename__ = "ar_invoice_payments"

    __table_args__ = (Index("idx_ar_invoice_payments_invoice", "invoice_id"),)

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("ar_invoices.id"), nullable=False
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal]
    method: Mapped[str] = mapped_column(String(50), default="bank")

    invoice: Mapped[InvoiceModel] = relationship(back_populates="payments")

    def to_dto(self) -> InvoicePayment:
        return InvoicePayment(
            id=self.id,
            payment_date=self.payment_date,
            amount=self.amount,
            method=self.method,
        )
