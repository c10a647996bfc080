"""
Accounts Payable Service (``ledger_modules.ap.service``).

Responsibility
--------------
Vendors, bills with maker-checker approval, bill payments and vendor
credits.  Every change that affects Accounts Payable publishes the matching
domain event; the vendor's cached ``balance_due`` is updated in the same
transaction.

Invariants enforced
-------------------
* Period lock is checked first by every mutating operation.
* Bills below the approval threshold auto-approve and post at once; bills
  at or above it stay ``pending_approval`` until ``approve_bill``.
* Payments clamp to the remaining ``balance_due``.

Failure modes
-------------
* ``PeriodLockedError`` -- operation dated on or before the lock date.
* ``RecordNotFoundError`` -- unknown vendor or bill.
* ``InvalidTransitionError`` -- approving a non-pending bill, paying an
  unapproved one.
* ``InvalidPaymentError`` -- non-positive amount, bill already paid.
* ``AccountNotFoundError`` / ``AccountTypeMismatchError`` -- a bill or credit
  aimed at an unknown or non-Expense account.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.store import CollectionStore
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.events import BillApproved, BillPaid, VendorCreditIssued
from ledger_kernel.domain.values import ZERO, money
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountTypeMismatchError,
    InvalidPaymentError,
    InvalidTransitionError,
    RecordNotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.period_guard import PeriodLockGuard
from ledger_kernel.services.role_resolver import RoleResolver
from ledger_modules._helpers import publish_event, unit_of_work
from ledger_modules.ap.config import APConfig
from ledger_modules.ap.models import (
    ApprovalStatus,
    Bill,
    BillStatus,
    ControlAccountCheck,
    Vendor,
    VendorCredit,
)
from ledger_modules.ap.orm import (
    BillModel,
    BillPaymentModel,
    VendorCreditModel,
    VendorModel,
)
from ledger_modules.ap.profiles import AccountRole

logger = get_logger("modules.ap.service")


class PayablesService:
    """
    Orchestrates the payables sub-ledger.

    Transaction boundary: this service commits on success, rolls back on
    failure.  Ledger postings run through the bus inside the same
    transaction.
    """

    def __init__(
        self,
        session: Session,
        bus: EventBus,
        period_guard: PeriodLockGuard,
        role_resolver: RoleResolver,
        clock: Clock | None = None,
        ap_config: APConfig | None = None,
    ):
        self._session = session
        self._bus = bus
        self._guard = period_guard
        self._roles = role_resolver
        self._clock = clock or SystemClock()
        self._config = ap_config or APConfig()
        self._vendors = CollectionStore(session, VendorModel)
        self._bills = CollectionStore(session, BillModel)

    # ------------------------------------------------------------------
    # Vendors
    # ------------------------------------------------------------------

    def create_vendor(
        self,
        name: str,
        contact_person: str = "",
        email: str = "",
        category: str = "",
        code: str | None = None,
    ) -> Vendor:
        with unit_of_work(self._session):
            vendor = VendorModel(
                code=code or f"v{self._vendor_count() + 1}",
                name=name,
                contact_person=contact_person,
                email=email,
                category=category,
                balance_due=ZERO,
            )
            self._vendors.add(vendor)
        logger.info("vendor_created", extra={"vendor_code": vendor.code, "vendor_name": name})
        return vendor.to_dto()

    def seed_vendors(self, vendor_defs: Iterable) -> int:
        """Create configured vendors whose code is not present yet."""
        with unit_of_work(self._session):
            existing = set(self._session.scalars(select(VendorModel.code)).all())
            created = 0
            for definition in vendor_defs:
                if definition.vendor_id in existing:
                    continue
                self._session.add(
                    VendorModel(
                        code=definition.vendor_id,
                        name=definition.name,
                        contact_person=definition.contact_person,
                        email=definition.email,
                        category=definition.category,
                        balance_due=ZERO,
                    )
                )
                created += 1
        logger.info("vendors_seeded", extra={"created_count": created})
        return created

    def list_vendors(self) -> list[Vendor]:
        query = select(VendorModel).order_by(VendorModel.code)
        return [v.to_dto() for v in self._session.scalars(query)]

    def get_vendor(self, vendor_id: UUID) -> Vendor:
        return self._get_vendor(vendor_id).to_dto()

    def get_vendor_by_code(self, code: str) -> Vendor:
        vendor = self._session.scalar(select(VendorModel).where(VendorModel.code == code))
        if vendor is None:
            raise RecordNotFoundError("vendors", code)
        return vendor.to_dto()

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    def create_bill(
        self,
        vendor_id: UUID,
        amount: Decimal,
        bill_date: date,
        due_date: date | None = None,
        description: str = "",
        expense_account_code: int | None = None,
    ) -> Bill:
        self._guard.assert_unlocked(bill_date)
        amount = money(amount)
        if amount <= 0:
            raise ValueError(f"Bill amount must be positive, got {amount}")
        self._check_cost_account(expense_account_code)

        with unit_of_work(self._session):
            vendor = self._get_vendor(vendor_id)
            needs_approval = self._config.requires_approval(amount)
            bill = BillModel(
                vendor_id=vendor.id,
                vendor_name=vendor.name,
                bill_date=bill_date,
                due_date=due_date,
                description=description,
                amount=amount,
                balance_due=amount,
                status=(BillStatus.PENDING_APPROVAL if needs_approval else BillStatus.OPEN).value,
                approval_status=(
                    ApprovalStatus.PENDING if needs_approval else ApprovalStatus.APPROVED
                ).value,
                expense_account_code=expense_account_code,
            )
            self._bills.add(bill)

            if not needs_approval:
                self._post_approval(bill, vendor)

        logger.info(
            "bill_created",
            extra={
                "bill_id": str(bill.id),
                "vendor_code": vendor.code,
                "amount": str(amount),
                "status": bill.status,
            },
        )
        return bill.to_dto()

    def approve_bill(self, bill_id: UUID) -> Bill:
        with unit_of_work(self._session):
            bill = self._get_bill(bill_id)
            if bill.status != BillStatus.PENDING_APPROVAL.value:
                raise InvalidTransitionError(str(bill_id), bill.status, "approve")
            self._guard.assert_unlocked(bill.bill_date)

            bill.status = BillStatus.OPEN.value
            bill.approval_status = ApprovalStatus.APPROVED.value
            self._post_approval(bill, self._get_vendor(bill.vendor_id))

        logger.info("bill_approved", extra={"bill_id": str(bill_id), "amount": str(bill.amount)})
        return bill.to_dto()

    def pay_bill(
        self,
        bill_id: UUID,
        amount: Decimal,
        method: str = "bank",
        payment_date: date | None = None,
    ) -> Bill:
        """Apply a payment, clamped to what is still owed on the bill."""
        payment_date = payment_date or self._clock.today()
        self._guard.assert_unlocked(payment_date)
        amount = money(amount)

        with unit_of_work(self._session):
            bill = self._get_bill(bill_id)
            if bill.approval_status != ApprovalStatus.APPROVED.value:
                raise InvalidTransitionError(str(bill_id), bill.status, "pay")
            if bill.status == BillStatus.PAID.value or bill.balance_due <= 0:
                raise InvalidPaymentError(str(bill_id), amount, "bill is already paid")
            if amount <= 0:
                raise InvalidPaymentError(str(bill_id), amount, "payment must be positive")

            paid = min(amount, money(bill.balance_due))
            bill.payments.append(
                BillPaymentModel(payment_date=payment_date, amount=paid, method=method)
            )
            bill.balance_due = money(bill.balance_due) - paid
            bill.status = (BillStatus.PAID if bill.balance_due == 0 else BillStatus.PARTIAL).value

            vendor = self._get_vendor(bill.vendor_id)
            self._adjust_vendor_balance(vendor, -paid)

            publish_event(
                self._bus,
                BillPaid(
                    bill_id=str(bill.id),
                    payment_date=payment_date,
                    vendor_id=str(vendor.id),
                    amount=paid,
                    method=method,
                ),
            )

        logger.info(
            "bill_paid",
            extra={
                "bill_id": str(bill_id),
                "paid": str(paid),
                "balance_due": str(bill.balance_due),
                "status": bill.status,
            },
        )
        return bill.to_dto()

    def get_bill(self, bill_id: UUID) -> Bill:
        return self._get_bill(bill_id).to_dto()

    def list_bills(self, status: BillStatus | None = None) -> list[Bill]:
        query = select(BillModel).order_by(BillModel.bill_date, BillModel.created_at)
        if status is not None:
            query = query.where(BillModel.status == status.value)
        return [b.to_dto() for b in self._session.scalars(query)]

    # ------------------------------------------------------------------
    # Vendor credits
    # ------------------------------------------------------------------

    def create_vendor_credit(
        self,
        vendor_id: UUID,
        amount: Decimal,
        credit_date: date,
        reason: str = "",
        expense_account_code: int | None = None,
    ) -> VendorCredit:
        self._guard.assert_unlocked(credit_date)
        amount = money(amount)
        if amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {amount}")
        self._check_cost_account(expense_account_code)

        with unit_of_work(self._session):
            vendor = self._get_vendor(vendor_id)
            credit = VendorCreditModel(
                vendor_id=vendor.id,
                vendor_name=vendor.name,
                credit_date=credit_date,
                amount=amount,
                reason=reason,
                expense_account_code=expense_account_code,
            )
            self._session.add(credit)
            self._adjust_vendor_balance(vendor, -amount)

            publish_event(
                self._bus,
                VendorCreditIssued(
                    credit_id=str(credit.id),
                    credit_date=credit_date,
                    vendor_id=str(vendor.id),
                    vendor_name=vendor.name,
                    amount=amount,
                    expense_account_code=expense_account_code,
                ),
            )

        logger.info(
            "vendor_credit_created",
            extra={"vendor_code": vendor.code, "amount": str(amount)},
        )
        return credit.to_dto()

    def list_vendor_credits(self, vendor_id: UUID | None = None) -> list[VendorCredit]:
        query = select(VendorCreditModel).order_by(VendorCreditModel.credit_date)
        if vendor_id is not None:
            query = query.where(VendorCreditModel.vendor_id == vendor_id)
        return [c.to_dto() for c in self._session.scalars(query)]

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def check_control_account(self) -> ControlAccountCheck:
        """Compare the AP control account with the sum of vendor balances."""
        ap_code = self._roles.resolve(AccountRole.AP_LIABILITY.value)
        control = LedgerSelector(self._session).balance_of(ap_code)
        subledger = sum(
            (money(v.balance_due) for v in self._session.scalars(select(VendorModel))),
            ZERO,
        )
        check = ControlAccountCheck(control_balance=control, subledger_balance=subledger)
        if not check.is_reconciled:
            logger.warning(
                "ap_control_account_mismatch",
                extra={
                    "control_balance": str(control),
                    "subledger_balance": str(subledger),
                },
            )
        return check

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _post_approval(self, bill: BillModel, vendor: VendorModel) -> None:
        self._adjust_vendor_balance(vendor, money(bill.amount))
        publish_event(
            self._bus,
            BillApproved(
                bill_id=str(bill.id),
                bill_date=bill.bill_date,
                vendor_id=str(vendor.id),
                vendor_name=vendor.name,
                amount=money(bill.amount),
                expense_account_code=bill.expense_account_code,
            ),
        )

    def _check_cost_account(self, code: int | None) -> None:
        """Bills and credits may only target Expense accounts."""
        if code is None:
            return
        account = self._session.scalar(select(Account).where(Account.code == code))
        if account is None:
            raise AccountNotFoundError(code)
        account_type = AccountType(account.account_type)
        if account_type != AccountType.EXPENSE:
            raise AccountTypeMismatchError(code, account_type.value, AccountType.EXPENSE.value)

    def _adjust_vendor_balance(self, vendor: VendorModel, delta: Decimal) -> None:
        self._vendors.update(vendor.id, balance_due=money(vendor.balance_due) + delta)

    def _vendor_count(self) -> int:
        return len(self._session.scalars(select(VendorModel.id)).all())

    def _get_vendor(self, vendor_id: UUID) -> VendorModel:
        vendor = self._vendors.get(vendor_id)
        if vendor is None:
            raise RecordNotFoundError("vendors", str(vendor_id))
        return vendor

    def _get_bill(self, bill_id: UUID) -> BillModel:
        bill = self._bills.get(bill_id)
        if bill is None:
            raise RecordNotFoundError("bills", str(bill_id))
        return bill
