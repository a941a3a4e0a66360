"""
Dependency service.

Decides whether a dependent request may run, based on the primary request
for the same target.
"""
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from db.models.requests import RequestModel, RequestStatus, RequestKind
from claim_worker.exceptions import LockConflictError, DependencyNotReadyError
from claim_worker.schemas import FailedPrimaryPolicy, DependencyVerdict
from claim_worker.utils.error_handling import is_lock_not_available, handle_database_error
from claim_worker.utils.logging import get_context_logger


def _probe_pending_primary(db: Session, request: RequestModel) -> Optional[RequestModel]:
    # Any unfinished primary for the target blocks, whatever its id
    # NOWAIT: a primary locked by another worker is being executed right now
    return (
        db.query(RequestModel)
        .filter(
            RequestModel.target_id == request.target_id,
            RequestModel.kind == RequestKind.PRIMARY.value,
            RequestModel.status.in_(RequestStatus.non_terminal())
        )
        .order_by(RequestModel.id.asc())
        .with_for_update(nowait=True)
        .first()
    )


def _latest_settled_primary(db: Session, request: RequestModel) -> Optional[RequestModel]:
    return (
        db.query(RequestModel)
        .filter(
            RequestModel.target_id == request.target_id,
            RequestModel.kind == RequestKind.PRIMARY.value,
            RequestModel.status.in_(RequestStatus.terminal())
        )
        .order_by(RequestModel.id.desc())
        .first()
    )


def ensure_dependency_ready(
    db: Session,
    request: RequestModel,
    policy: FailedPrimaryPolicy = FailedPrimaryPolicy.ERROR,
    trace_id: Optional[str] = None
) -> DependencyVerdict:
    """
    Check that no primary for a dependent request's target is unfinished
    and that the most recently settled one completed.

    Primary requests have no dependency and are always ready.

    Args:
        db: Database session inside the claim transaction
        request: The scanned (and locked) request
        policy: How to treat a primary that settled as 'error'
        trace_id: Trace ID for logging (optional)

    Returns:
        READY when the request may execute, PRIMARY_FAILED when the group
        should be settled as error without executing

    Raises:
        LockConflictError: If another worker holds the primary's row lock
        DependencyNotReadyError: If a primary for the target has not run yet
        DatabaseError: For any other database failure
    """
    if request.kind != RequestKind.DEPENDENT.value:
        return DependencyVerdict.READY

    logger = get_context_logger(
        "dependency_service",
        trace_id=trace_id,
        target_id=request.target_id,
        request_id=request.id
    )

    try:
        pending = _probe_pending_primary(db, request)
    except OperationalError as e:
        if is_lock_not_available(e):
            logger.debug("Primary request is locked by another worker")
            raise LockConflictError(
                f"Primary for target {request.target_id} is being processed",
                request_id=request.id,
                target_id=request.target_id,
                reason="primary_locked",
                original_exception=e
            )
        handle_database_error(e, "ensure_dependency_ready", logger=logger)
    except SQLAlchemyError as e:
        handle_database_error(e, "ensure_dependency_ready", logger=logger)

    if pending is not None:
        raise DependencyNotReadyError(
            f"Primary request {pending.id} for target {request.target_id} has not run",
            request_id=request.id,
            target_id=request.target_id,
            reason="primary_pending"
        )

    try:
        settled = _latest_settled_primary(db, request)
    except SQLAlchemyError as e:
        handle_database_error(e, "ensure_dependency_ready", logger=logger)

    if settled is not None and settled.status == RequestStatus.ERROR.value:
        if FailedPrimaryPolicy(policy) == FailedPrimaryPolicy.WAIT:
            raise DependencyNotReadyError(
                f"Primary request {settled.id} for target {request.target_id} failed",
                request_id=request.id,
                target_id=request.target_id,
                reason="primary_failed"
            )
        logger.warning(f"Primary request {settled.id} failed; dependents will be settled as error")
        return DependencyVerdict.PRIMARY_FAILED

    return DependencyVerdict.READY
