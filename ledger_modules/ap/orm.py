"""
Accounts Payable ORM Models (``ledger_modules.ap.orm``).

Responsibility
--------------
SQLAlchemy persistence models for the payables sub-ledger.  Maps the frozen
dataclasses of ``models.py`` to tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``ledger_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``ledger_kernel``
(except the table-discovery hook in ``db.engine``).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_modules.ap.models import (
    ApprovalStatus,
    Bill,
    BillPayment,
    BillStatus,
    Vendor,
    VendorCredit,
)


class VendorModel(TrackedBase):
    """
    ORM model for vendors.

    Guarantees:
        - code is unique (uq_ap_vendors_code).
        - balance_due changes only alongside the matching AP posting.
    """

    __tablename__ = "ap_vendors"

    __table_args__ = (UniqueConstraint("code", name="uq_ap_vendors_code"),)

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_person: Mapped[str] = mapped_column(String(255), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    category: Mapped[str] = mapped_column(String(100), default="")
    balance_due: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    def to_dto(self) -> Vendor:
        return Vendor(
            id=self.id,
            code=self.code,
            name=self.name,
            contact_person=self.contact_person,
            email=self.email,
            category=self.category,
            balance_due=self.balance_due,
        )

    def __repr__(self) -> str:
        return f"<VendorModel {self.code}: {self.name}>"


class BillModel(TrackedBase):
    """ORM model for vendor bills; payments are stored as child rows."""

    __tablename__ = "ap_bills"

    __table_args__ = (
        Index("idx_ap_bills_vendor", "vendor_id"),
        Index("idx_ap_bills_status", "status"),
    )

    vendor_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("ap_vendors.id"), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bill_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str] = mapped_column(String(500), default="")
    amount: Mapped[Decimal]
    balance_due: Mapped[Decimal]
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    approval_status: Mapped[str] = mapped_column(String(20), nullable=False)
    expense_account_code: Mapped[int | None] = mapped_column(Integer, nullable=True)

    payments: Mapped[list["BillPaymentModel"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillPaymentModel.payment_date",
    )

    def to_dto(self) -> Bill:
        return Bill(
            id=self.id,
            vendor_id=self.vendor_id,
            vendor_name=self.vendor_name,
            bill_date=self.bill_date,
            due_date=self.due_date,
            description=self.description,
            amount=self.amount,
            balance_due=self.balance_due,
            status=BillStatus(self.status),
            approval_status=ApprovalStatus(self.approval_status),
            expense_account_code=self.expense_account_code,
            payments=tuple(p.to_dto() for p in self.payments),
        )

    def __repr__(self) -> str:
        return f"<BillModel {self.id} {self.vendor_name} {self.amount} {self.status}>"


class BillPaymentModel(TrackedBase):
    __tablename__ = "ap_bill_payments"

    __table_args__ = (Index("idx_ap_bill_payments_bill", "bill_id"),)

    bill_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("ap_bills.id"), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal]
    method: Mapped[str] = mapped_column(String(50), default="bank")

    bill: Mapped[BillModel] = relationship(back_populates="payments")

    def to_dto(self) -> BillPayment:
        return BillPayment(
            id=self.id,
            payment_date=self.payment_date,
            amount=self.amount,
            method=self.method,
        )


class VendorCreditModel(TrackedBase):
    __tablename__ = "ap_vendor_credits"

    __table_args__ = (Index("idx_ap_vendor_credits_vendor", "vendor_id"),)

    vendor_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("ap_vendors.id"), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    credit_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal]
    reason: Mapped[str] = mapped_column(String(500), default="")
    expense_account_code: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def to_dto(self) -> VendorCredit:
        return VendorCredit(
            id=self.id,
            vendor_id=self.vendor_id,
            vendor_name=self.vendor_name,
            credit_date=self.credit_date,
            amount=self.amount,
            reason=self.reason,
            expense_account_code=self.expense_account_code,
        )
