"""
Module: ledger_kernel.services.chart_of_accounts
Responsibility: Administer the chart of accounts: idempotent seeding, adding
    and deleting accounts, and mapping expense categories onto accounts.
Architecture position: Kernel > Services.

Invariants enforced:
    - Account codes are unique.
    - System accounts are never deleted (also enforced by an ORM listener).
    - Accounts referenced by posted lines are never deleted.

Failure modes:
    - AccountAlreadyExistsError, SystemAccountError, AccountReferencedError,
      AccountNotFoundError.
    - MissingMappingError from match_expense_account(); expense_account_for()
      recovers from it by falling back to the default expense account.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    AccountReferencedError,
    MissingMappingError,
    SystemAccountError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.base import BaseService

logger = get_logger("services.chart_of_accounts")


def _to_info(account: Account) -> AccountInfo:
    return AccountInfo(
        id=account.id,
        code=account.code,
        name=account.name,
        account_type=AccountType(account.account_type),
        subtype=account.subtype,
        is_system=account.is_system,
    )


class ChartOfAccountsService(BaseService[Account]):
    """Administrative operations on the chart of accounts."""

    def __init__(
        self,
        session: Session,
        default_expense_code: int = 6000,
        cogs_code: int | None = None,
    ):
        super().__init__(session)
        self._default_expense_code = default_expense_code
        self._cogs_code = cogs_code

    def get(self, code: int) -> Account | None:
        return self.session.scalar(select(Account).where(Account.code == code))

    def seed(self, account_defs: Iterable) -> int:
        """
        Create every configured account whose code is not already present.

        Accepts objects exposing code, name, account_type, subtype and
        is_system (AccountDef).  Returns the number of accounts created.
        """
        existing = set(self.session.scalars(select(Account.code)).all())
        created = 0
        for definition in account_defs:
            if definition.code in existing:
                continue
            self.session.add(
                Account(
                    code=definition.code,
                    name=definition.name,
                    account_type=AccountType(definition.account_type).value,
                    subtype=definition.subtype,
                    is_system=definition.is_system,
                )
            )
            existing.add(definition.code)
            created += 1
        self.session.flush()
        logger.info("chart_of_accounts_seeded", extra={"created_count": created})
        return created

    def add_account(
        self,
        code: int,
        name: str,
        account_type: AccountType | str,
        subtype: str | None = None,
        is_system: bool = False,
    ) -> AccountInfo:
        if self.get(code) is not None:
            raise AccountAlreadyExistsError(code)
        account = Account(
            code=code,
            name=name,
            account_type=AccountType(account_type).value,
            subtype=subtype,
            is_system=is_system,
        )
        self.session.add(account)
        self.session.flush()
        logger.info("account_added", extra={"account_code": code, "account_name": name})
        return _to_info(account)

    def delete_account(self, code: int) -> None:
        account = self.get(code)
        if account is None:
            raise AccountNotFoundError(code)
        if account.is_system:
            raise SystemAccountError(code)
        if JournalSelector(self.session).lines_touching(code):
            raise AccountReferencedError(code)
        self.session.delete(account)
        self.session.flush()
        logger.info("account_deleted", extra={"account_code": code})

    def match_expense_account(self, category: str) -> int:
        """
        Find the Expense account whose name contains the category
        (case-insensitive).  Lowest code wins when several match.  The COGS
        account is never a match, so operating expenses stay below gross profit.

        Raises:
            MissingMappingError: If no Expense account matches.
        """
        needle = category.strip().lower()
        if needle:
            query = (
                select(Account)
                .where(Account.account_type == AccountType.EXPENSE.value)
                .order_by(Account.code)
            )
            for account in self.session.scalars(query):
                if account.code == self._cogs_code:
                    continue
                if needle in account.name.lower():
                    return account.code
        raise MissingMappingError("expense_category", category)

    def expense_account_for(self, category: str) -> int:
        try:
            return self.match_expense_account(category)
        except MissingMappingError:
            logger.warning(
                "expense_category_unmapped",
                extra={"category": category, "fallback_account": self._default_expense_code},
            )
            return self._default_expense_code
