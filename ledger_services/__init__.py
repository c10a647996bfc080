"""Service layer: wires kernel and module services for a session."""

from ledger_services.posting_orchestrator import (
    PostingOrchestrator,
    build_posting_orchestrator,
)

__all__ = ["PostingOrchestrator", "build_posting_orchestrator"]
