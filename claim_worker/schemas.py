"""
Schema definitions for the claim worker.

Immutable views of ledger rows handed to work executors, plus the small
value types exchanged between the claim services and the sweep loop.
"""
from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

from db.models.requests import RequestStatus, RequestKind

__all__ = [
    "RequestStatus",
    "RequestKind",
    "FailedPrimaryPolicy",
    "DependencyVerdict",
    "RequestSnapshot",
    "ClaimedGroup",
    "ExecutionResult",
]


class FailedPrimaryPolicy(str, Enum):
    """What happens to dependents whose primary settled as 'error'."""
    ERROR = "error"  # settle the dependent group as error without executing it
    WAIT = "wait"    # leave the dependents 'new' until an operator intervenes


class DependencyVerdict(str, Enum):
    """Outcome of a successful dependency check."""
    READY = "ready"
    PRIMARY_FAILED = "primary_failed"


class RequestSnapshot(BaseModel):
    """Read-only copy of a claimed ledger row."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    kind: RequestKind
    target_id: str
    claim_owner: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class ClaimedGroup(BaseModel):
    """The set of requests one claim owns until settlement."""
    model_config = ConfigDict(frozen=True)

    claim_owner: str
    anchor_id: int = Field(..., description="Id of the request the scanner found")
    target_id: str
    kind: RequestKind
    requests: List[RequestSnapshot]

    @property
    def request_ids(self) -> List[int]:
        return [request.id for request in self.requests]


class ExecutionResult(BaseModel):
    """Outcome reported by a work executor."""
    succeeded: bool
    detail: Optional[str] = None

    @classmethod
    def success(cls, detail: Optional[str] = None) -> "ExecutionResult":
        return cls(succeeded=True, detail=detail)

    @classmethod
    def failure(cls, detail: Optional[str] = None) -> "ExecutionResult":
        return cls(succeeded=False, detail=detail)
