"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains
    configuration: the seed chart of accounts, role bindings, tax settings
    (including the period lock date), thresholds and seed vendors.

Architecture position:
    Sits above ``ledger_kernel`` and below ``ledger_modules`` /
    ``ledger_services``.  The kernel never imports from this package.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` / ``KeyError`` -- structural validation failures.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_config
from ledger_config.schema import (
    AccountDef,
    LedgerConfig,
    RoleBinding,
    TaxSettings,
    TaxSplit,
    VendorDef,
)

_logger = logging.getLogger("ledger_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> LedgerConfig:
    """
    Load and validate the active configuration set.

    Args:
        path: Override path to a YAML configuration file.  Defaults to the
            bundled ``sets/default.yaml``.

    Raises:
        FileNotFoundError, ValueError, KeyError.
    """
    config = load_config(Path(path) if path is not None else _DEFAULT_CONFIG_PATH)

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "account_count": len(config.accounts),
            "role_count": len(config.roles),
        },
    )
    return config


__all__ = [
    "get_active_config",
    "AccountDef",
    "LedgerConfig",
    "RoleBinding",
    "TaxSettings",
    "TaxSplit",
    "VendorDef",
]
