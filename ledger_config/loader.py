"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen dataclasses of
``ledger_config.schema``.  Runtime callers go through
``ledger_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import (
    AccountDef,
    LedgerConfig,
    RoleBinding,
    TaxSettings,
    TaxSplit,
    VendorDef,
)

_ACCOUNT_TYPES = {"asset", "liability", "equity", "income", "expense"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any) -> Decimal:
    # YAML floats go through str() so 0.4 stays 0.4
    return Decimal(str(value))


def parse_account(data: dict[str, Any]) -> AccountDef:
    account_type = str(data["type"]).lower()
    if account_type not in _ACCOUNT_TYPES:
        raise ValueError(f"Account {data['code']}: unknown type {data['type']!r}")
    return AccountDef(
        code=int(data["code"]),
        name=data["name"],
        account_type=account_type,
        subtype=data.get("subtype"),
        is_system=bool(data.get("system", False)),
    )


def parse_tax(data: dict[str, Any]) -> tuple[TaxSettings, TaxSplit]:
    settings = TaxSettings(
        is_registered=bool(data.get("is_registered", False)),
        gstin=data.get("gstin"),
        state=data.get("state", "Maharashtra"),
        lock_date=parse_date(data.get("lock_date")),
    )
    split_data = data.get("split", {})
    split = TaxSplit(
        igst=parse_decimal(split_data.get("igst", "0.50")),
        cgst=parse_decimal(split_data.get("cgst", "0.25")),
        sgst=parse_decimal(split_data.get("sgst", "0.25")),
    )
    if split.igst + split.cgst + split.sgst != Decimal("1"):
        raise ValueError("Tax split shares must add up to 1")
    return settings, split


def parse_vendor(data: dict[str, Any]) -> VendorDef:
    return VendorDef(
        vendor_id=str(data["id"]),
        name=data["name"],
        contact_person=data.get("contact_person", ""),
        email=data.get("email", ""),
        category=data.get("category", ""),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw configuration."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """Parse a raw configuration dict into a LedgerConfig."""
    tax, split = parse_tax(data.get("tax", {}))
    posting = data.get("posting", {})
    payables = data.get("payables", {})

    accounts = tuple(parse_account(a) for a in data.get("accounts", []))
    codes = [a.code for a in accounts]
    if len(codes) != len(set(codes)):
        raise ValueError("Duplicate account codes in configuration")

    roles = tuple(
        RoleBinding(role=role, account_code=int(code))
        for role, code in (data.get("roles") or {}).items()
    )
    for binding in roles:
        if binding.account_code not in codes:
            raise ValueError(
                f"Role {binding.role} is bound to unknown account {binding.account_code}"
            )

    return LedgerConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        currency=data.get("currency", "INR"),
        tax=tax,
        tax_split=split,
        balance_tolerance=parse_decimal(posting.get("balance_tolerance", "0.05")),
        cogs_ratio=parse_decimal(posting.get("cogs_ratio", "0.4")),
        default_expense_account=int(posting.get("default_expense_account", 6000)),
        approval_threshold=parse_decimal(payables.get("approval_threshold", "1000")),
        accounts=accounts,
        roles=roles,
        vendors=tuple(parse_vendor(v) for v in data.get("vendors", [])),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LedgerConfig:
    return parse_config(load_yaml_file(path))
