"""Transaction management utilities."""
from contextlib import contextmanager
from typing import Any, Optional
from enum import Enum

from sqlalchemy.orm import Session
from sqlalchemy.sql import text
from sqlalchemy.exc import SQLAlchemyError, OperationalError, IntegrityError

from claim_worker.utils.logging import get_context_logger
from claim_worker.utils.error_handling import is_lock_not_available, handle_database_error
from claim_worker.exceptions import (
    DatabaseError, ErrorCode, ClaimRejectedError, LockConflictError
)

logger = get_context_logger("transaction")


# Transaction isolation levels
class IsolationLevel(str, Enum):
    """SQL transaction isolation levels."""
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


def _set_isolation_level(db: Session, isolation_level: Optional[IsolationLevel], logger) -> None:
    # SET TRANSACTION must be the first statement of the transaction
    if isolation_level and not db.in_transaction():
        db.execute(text(f"SET TRANSACTION ISOLATION LEVEL {isolation_level.value}"))
        logger.debug(f"Set transaction isolation level to {isolation_level.value}")


@contextmanager
def transaction_scope(
    db: Session,
    trace_id: Optional[str] = None,
    isolation_level: Optional[IsolationLevel] = None
) -> Any:
    """
    Provide a transactional scope around a series of operations.

    Commits when the block exits normally.

    Args:
        db: Database session
        trace_id: Trace ID for logging (optional)
        isolation_level: SQL transaction isolation level (optional)

    Yields:
        Database session for use in operations

    Raises:
        IntegrityError, OperationalError: Re-raised unwrapped so callers can
            interpret constraint and lock failures
        DatabaseError: For any other database error
        Original exception: Any other exception that occurred in the with block
    """
    logger = get_context_logger("transaction", trace_id=trace_id)

    try:
        _set_isolation_level(db, isolation_level, logger)
        logger.debug("Transaction started")
        yield db
        db.commit()
        logger.debug("Transaction committed successfully")
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        logger.warning(f"Transaction rolled back: {type(e).__name__}: {str(e)}")
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {type(e).__name__}: {str(e)}")
        raise DatabaseError(
            f"Database error: {str(e)}",
            error_code=ErrorCode.DATABASE_ERROR,
            original_exception=e,
            operation="transaction"
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back due to: {type(e).__name__}: {str(e)}")
        raise


@contextmanager
def claim_transaction(
    db: Session,
    trace_id: Optional[str] = None,
    isolation_level: Optional[IsolationLevel] = IsolationLevel.READ_COMMITTED
) -> Any:
    """
    Hold one claim attempt's transaction open.

    Row locks taken inside the block last until the transaction ends. The
    block never commits on its own: settlement commits explicitly, and
    anything still open when the block exits is rolled back, which returns
    every tentatively claimed row to 'new'.

    Args:
        db: Database session
        trace_id: Trace ID for logging (optional)
        isolation_level: Isolation level, READ COMMITTED by default

    Yields:
        Database session for use in operations

    Raises:
        ClaimRejectedError: Re-raised after rollback (lock conflicts, unmet dependencies)
        LockConflictError: If a NOWAIT lock could not be obtained
        DatabaseError: For any other database error
    """
    logger = get_context_logger("transaction", trace_id=trace_id)

    try:
        _set_isolation_level(db, isolation_level, logger)
        yield db
    except ClaimRejectedError as e:
        db.rollback()
        logger.debug(f"Claim transaction rolled back: {e.message}")
        raise
    except OperationalError as e:
        db.rollback()
        if is_lock_not_available(e):
            raise LockConflictError(
                "Row lock held by another worker",
                reason="row_locked",
                original_exception=e
            )
        handle_database_error(e, "claim_transaction", logger=logger, trace_id=trace_id)
    except SQLAlchemyError as e:
        db.rollback()
        handle_database_error(e, "claim_transaction", logger=logger, trace_id=trace_id)
    except BaseException:
        db.rollback()
        raise
    else:
        if db.in_transaction():
            db.rollback()
            logger.debug("Unsettled claim transaction rolled back")
