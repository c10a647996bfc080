"""
Posting rule registry.

Maps each event type to its versioned posting rules.  The PostingEngine
subscribes to the bus for every event type registered here.
"""

from collections.abc import Iterable

from ledger_kernel.domain.dtos import EntrySpec
from ledger_kernel.domain.events import DomainEvent
from ledger_kernel.exceptions import PostingRuleNotFoundError
from ledger_kernel.posting_rules.base import PostingContext, PostingRule


class PostingRuleRegistry:
    def __init__(self):
        self._rules: dict[str, dict[int, PostingRule]] = {}
        self._defaults: dict[str, int] = {}

    def register(self, rule: PostingRule, set_default: bool = True) -> None:
        """
        Add ``rule`` under its event type and version.

        With ``set_default=False`` the rule is only used when its version is
        asked for explicitly.
        """
        self._rules.setdefault(rule.event_type, {})[rule.version] = rule
        if set_default or rule.event_type not in self._defaults:
            self._defaults[rule.event_type] = rule.version

    def register_all(self, rules: Iterable[PostingRule]) -> None:
        for rule in rules:
            self.register(rule)

    def get_rule(self, event_type: str, version: int | None = None) -> PostingRule | None:
        versions = self._rules.get(event_type)
        if not versions:
            return None
        return versions.get(version if version is not None else self._defaults[event_type])

    def compute_entries(
        self,
        event: DomainEvent,
        context: PostingContext,
        version: int | None = None,
    ) -> list[EntrySpec]:
        """
        Candidate entries for ``event`` from its registered rule.

        Raises:
            PostingRuleNotFoundError: No rule handles the event type.
        """
        rule = self.get_rule(event.event_type, version)
        if rule is None:
            raise PostingRuleNotFoundError(event.event_type)
        return rule.compute_entries(event, context)

    def list_event_types(self) -> list[str]:
        return list(self._rules)

    def list_versions(self, event_type: str) -> list[int]:
        return sorted(self._rules.get(event_type, {}))
