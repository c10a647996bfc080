"""
Ledger configuration schema.

Frozen dataclasses that the loader parses YAML configuration sets into.
Nothing here reads files; see ``ledger_config.loader``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

# ---------------------------------------------------------------------------
# Chart of accounts and roles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountDef:
    """One account of the seed chart."""

    code: int
    name: str
    account_type: str  # asset, liability, equity, income, expense
    subtype: str | None = None
    is_system: bool = False


@dataclass(frozen=True)
class RoleBinding:
    """Binds a semantic role used by posting rules to an account code."""

    role: str
    account_code: int


# ---------------------------------------------------------------------------
# Tax and period settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxSettings:
    """
    Registration details and the period lock date.

    Postings dated on or before ``lock_date`` are rejected.
    """

    is_registered: bool = False
    gstin: str | None = None
    state: str = "Maharashtra"
    lock_date: date | None = None


@dataclass(frozen=True)
class TaxSplit:
    """Share of collected tax reported under each component."""

    igst: Decimal = Decimal("0.50")
    cgst: Decimal = Decimal("0.25")
    sgst: Decimal = Decimal("0.25")


# ---------------------------------------------------------------------------
# Sub-ledger seed data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VendorDef:
    vendor_id: str
    name: str
    contact_person: str = ""
    email: str = ""
    category: str = ""


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    """A complete, parsed configuration set."""

    config_id: str
    version: int
    currency: str
    tax: TaxSettings
    tax_split: TaxSplit
    balance_tolerance: Decimal
    cogs_ratio: Decimal
    default_expense_account: int
    approval_threshold: Decimal
    accounts: tuple[AccountDef, ...] = ()
    roles: tuple[RoleBinding, ...] = ()
    vendors: tuple[VendorDef, ...] = ()
    checksum: str = field(default="", compare=False)

    @property
    def role_map(self) -> dict[str, int]:
        return {binding.role: binding.account_code for binding in self.roles}

    def with_lock_date(self, lock_date: date | None) -> LedgerConfig:
        """Copy of this config with a different period lock date."""
        return dataclasses.replace(
            self, tax=dataclasses.replace(self.tax, lock_date=lock_date)
        )

    def with_overrides(self, **changes) -> LedgerConfig:
        return dataclasses.replace(self, **changes)
