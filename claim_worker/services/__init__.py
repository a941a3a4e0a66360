"""
Ledger services.

Each function takes a SQLAlchemy session and performs one step of the
request lifecycle.
"""
from .enqueue_service import enqueue_request
from .scanner_service import scan_next_request, MIN_CURSOR
from .dependency_service import ensure_dependency_ready
from .claim_service import claim_request_group, generate_claim_owner
from .settlement_service import settle_claim
from .ledger_service import get_request, list_requests, get_ledger_stats

__all__ = [
    "enqueue_request",
    "scan_next_request",
    "MIN_CURSOR",
    "ensure_dependency_ready",
    "claim_request_group",
    "generate_claim_owner",
    "settle_claim",
    "get_request",
    "list_requests",
    "get_ledger_stats",
]
