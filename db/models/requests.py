"""
Request ledger model.

Every unit of work handed to the claim workers is a row in this table.
Rows are only ever inserted and updated, never deleted.
"""
from enum import Enum

from sqlalchemy import Column, BigInteger, String, Text, CheckConstraint, Index
from sqlalchemy.sql import func, text
from sqlalchemy.types import TIMESTAMP
from sqlalchemy.dialects.postgresql import JSONB

from db.models.base import Base


class RequestStatus(str, Enum):
    """Lifecycle states of a ledger request."""
    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    ERROR = "error"

    @classmethod
    def non_terminal(cls):
        return (cls.NEW.value, cls.IN_PROGRESS.value)

    @classmethod
    def terminal(cls):
        return (cls.COMPLETE.value, cls.ERROR.value)


class RequestKind(str, Enum):
    """Request kinds: a primary establishes a target, a dependent modifies it."""
    PRIMARY = "primary"
    DEPENDENT = "dependent"


class RequestModel(Base):
    """
    Request ledger - one row per unit of work.

    The ascending id is the FIFO order in which workers service requests.
    """
    __tablename__ = 'requests'

    # Primary Key (BIGSERIAL, never reused)
    id = Column(BigInteger, primary_key=True, autoincrement=True)

    # Lifecycle
    status = Column(
        String(20),
        nullable=False,
        server_default=RequestStatus.NEW.value,
        comment="Lifecycle status: new, in_progress, complete, error"
    )
    kind = Column(
        String(20),
        nullable=False,
        comment="'primary' establishes a target, 'dependent' modifies it"
    )
    target_id = Column(
        String(255),
        nullable=False,
        comment="Logical entity the request concerns"
    )
    claim_owner = Column(
        String(64),
        nullable=True,
        comment="Per-claim worker identifier"
    )

    # Work data
    payload = Column(JSONB, nullable=False, server_default='{}')
    error_detail = Column(Text, nullable=True, comment="Failure reason recorded at settlement")

    # Timestamps
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    claimed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    settled_at = Column(TIMESTAMP(timezone=True), nullable=True)

    # Table constraints and indexes
    __table_args__ = (
        CheckConstraint(
            "status IN ('new', 'in_progress', 'complete', 'error')",
            name='chk_requests_status'
        ),
        CheckConstraint(
            "kind IN ('primary', 'dependent')",
            name='chk_requests_kind'
        ),
        # At most one non-terminal primary per target
        Index(
            'uq_requests_active_primary',
            'target_id',
            unique=True,
            postgresql_where=text("kind = 'primary' AND status IN ('new', 'in_progress')")
        ),
        Index('idx_requests_status_id', 'status', 'id'),
        Index('idx_requests_target_kind_status', 'target_id', 'kind', 'status'),
    )

    def __repr__(self):
        return (
            f"<Request(id={self.id}, kind='{self.kind}', "
            f"target_id='{self.target_id}', status='{self.status}')>"
        )

    def to_dict(self):
        """Convert to dictionary for API responses."""
        return {
            'id': self.id,
            'status': self.status,
            'kind': self.kind,
            'target_id': self.target_id,
            'claim_owner': self.claim_owner,
            'payload': self.payload,
            'error_detail': self.error_detail,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'claimed_at': self.claimed_at.isoformat() if self.claimed_at else None,
            'settled_at': self.settled_at.isoformat() if self.settled_at else None
        }
