"""
Enqueue service.

Inserts new requests into the ledger and wakes idle workers. Callers that
front this with an API are responsible for authentication and wire format.
"""
from typing import Optional, Dict, Any, Union

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError

from db.models.requests import RequestModel, RequestStatus, RequestKind
from claim_worker.config import WAKE_CHANNEL
from claim_worker.core.wake_listener import publish_wakeup
from claim_worker.exceptions import ValidationError, DuplicateError, ErrorCode
from claim_worker.utils.error_handling import is_unique_violation, handle_database_error
from claim_worker.utils.logging import get_context_logger
from claim_worker.utils.transaction import transaction_scope

MAX_TARGET_ID_LENGTH = 255


def _coerce_kind(kind: Union[RequestKind, str]) -> RequestKind:
    try:
        return RequestKind(kind)
    except ValueError:
        raise ValidationError(
            f"kind must be one of: {', '.join(k.value for k in RequestKind)}",
            field="kind",
            value=kind
        )


def enqueue_request(
    db: Session,
    target_id: str,
    kind: Union[RequestKind, str],
    payload: Optional[Dict[str, Any]] = None,
    channel: str = WAKE_CHANNEL,
    trace_id: Optional[str] = None
) -> int:
    """
    Add a request to the ledger in state 'new'.

    The insert and the wakeup notification share one transaction, so workers
    are only woken once the row is visible to them.

    Args:
        db: Database session
        target_id: Entity the request concerns
        kind: 'primary' or 'dependent'
        payload: Opaque data for the work executor (optional)
        channel: Wakeup channel to notify
        trace_id: Trace ID for logging (optional)

    Returns:
        The new request id

    Raises:
        ValidationError: If input validation fails
        DuplicateError: If the target already has a non-terminal primary request
        DatabaseError: If the database operation fails
    """
    logger = get_context_logger("enqueue_service", trace_id=trace_id, target_id=target_id)

    if not target_id or not isinstance(target_id, str) or not target_id.strip():
        raise ValidationError(
            "target_id is required",
            error_code=ErrorCode.VALIDATION_ERROR,
            field="target_id"
        )
    if len(target_id) > MAX_TARGET_ID_LENGTH:
        raise ValidationError(
            f"target_id exceeds maximum length of {MAX_TARGET_ID_LENGTH} characters",
            error_code=ErrorCode.VALIDATION_ERROR,
            field="target_id"
        )
    request_kind = _coerce_kind(kind)
    if payload is not None and not isinstance(payload, dict):
        raise ValidationError(
            "payload must be a dictionary",
            error_code=ErrorCode.VALIDATION_ERROR,
            field="payload"
        )

    try:
        with transaction_scope(db, trace_id=trace_id) as tx:
            request = RequestModel(
                status=RequestStatus.NEW.value,
                kind=request_kind.value,
                target_id=target_id,
                payload=payload or {}
            )
            tx.add(request)
            tx.flush()
            request_id = request.id
            publish_wakeup(tx, channel)
    except IntegrityError as e:
        if is_unique_violation(e):
            logger.warning(f"Rejected second active primary request for target {target_id}")
            raise DuplicateError(
                f"Target {target_id} already has a pending primary request",
                resource_type="request",
                resource_id=target_id,
                original_exception=e
            )
        handle_database_error(e, "enqueue_request", logger=logger)
    except OperationalError as e:
        handle_database_error(e, "enqueue_request", logger=logger)

    logger.info(f"Enqueued {request_kind.value} request {request_id}")
    return request_id
