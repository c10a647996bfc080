"""
Accounts Payable Configuration Schema (``ledger_modules.ap.config``).

Maker-checker threshold for bills.  Built from the active LedgerConfig via
``APConfig.from_ledger_config``; no component reads config files directly.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from ledger_kernel.logging_config import get_logger

logger = get_logger("modules.ap.config")


@dataclass(frozen=True)
class APConfig:
    """
    Bills strictly below ``approval_threshold`` auto-approve; bills at or
    above it wait for an explicit approval.
    """

    approval_threshold: Decimal = Decimal("1000")

    def __post_init__(self):
        if self.approval_threshold < 0:
            raise ValueError("approval_threshold cannot be negative")

    @classmethod
    def from_ledger_config(cls, config) -> Self:
        instance = cls(approval_threshold=config.approval_threshold)
        logger.info(
            "ap_config_loaded",
            extra={"approval_threshold": str(instance.approval_threshold)},
        )
        return instance

    def requires_approval(self, amount: Decimal) -> bool:
        return amount >= self.approval_threshold
