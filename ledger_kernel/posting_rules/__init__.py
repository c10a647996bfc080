"""Posting rules: transform domain events into candidate journal entries."""

from ledger_kernel.posting_rules.base import BasePostingRule, PostingContext, PostingRule
from ledger_kernel.posting_rules.registry import PostingRuleRegistry

__all__ = [
    "BasePostingRule",
    "PostingContext",
    "PostingRule",
    "PostingRuleRegistry",
]
