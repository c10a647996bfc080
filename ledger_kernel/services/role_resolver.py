"""
RoleResolver -- maps semantic account roles to chart-of-accounts codes.

Posting rules speak in roles ("AccountsReceivable", "SalesRevenue", ...);
the resolver binds each role to the numeric account code configured for it.
"""

from collections.abc import Mapping

from ledger_kernel.exceptions import MissingMappingError


class RoleResolver:
    """
    Resolves account roles to account codes.

    Bindings come from configuration; tests may register their own.
    """

    def __init__(self, bindings: Mapping[str, int] | None = None):
        self._bindings: dict[str, int] = dict(bindings or {})

    def register_binding(self, role: str, account_code: int) -> None:
        self._bindings[role] = account_code

    def resolve(self, role: str) -> int:
        """
        Resolve a role to its account code.

        Raises:
            MissingMappingError: If the role has no binding.
        """
        if role not in self._bindings:
            raise MissingMappingError("role", role)
        return self._bindings[role]

    def has_role(self, role: str) -> bool:
        return role in self._bindings

    @property
    def bindings(self) -> dict[str, int]:
        return dict(self._bindings)

    def clear(self) -> None:
        """Clear all bindings. For testing only."""
        self._bindings.clear()
