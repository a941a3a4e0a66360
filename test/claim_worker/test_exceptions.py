"""
FILE: test/claim_worker/test_exceptions.py
==========================================
"""

from claim_worker.exceptions import (
    BaseAppException,
    ErrorCode,
    ClaimRejectedError,
    LockConflictError,
    DependencyNotReadyError,
    DuplicateError,
    ValidationError,
    ExecutionFailedError,
)


class TestBaseAppException:

    def test_to_dict(self):
        exc = BaseAppException("broken", error_code=ErrorCode.INTERNAL_ERROR, details={"a": 1})
        data = exc.to_dict()

        assert data["error_code"] == 9000
        assert data["error_type"] == "INTERNAL_ERROR"
        assert data["message"] == "broken"
        assert data["details"] == {"a": 1}

    def test_original_exception_recorded(self):
        exc = BaseAppException("wrapped", original_exception=RuntimeError("inner"))
        assert exc.details["original_error"] == "inner"

    def test_kwargs_become_details(self):
        exc = BaseAppException("x", operation="scan")
        assert exc.details["operation"] == "scan"


class TestClaimRejections:

    def test_lock_conflict_is_claim_rejection(self):
        exc = LockConflictError("locked", request_id=7, target_id="t-1", reason="group_locked")

        assert isinstance(exc, ClaimRejectedError)
        assert exc.error_code == ErrorCode.LOCK_CONFLICT
        assert exc.request_id == 7
        assert exc.reason == "group_locked"
        assert exc.details == {"request_id": 7, "target_id": "t-1", "reason": "group_locked"}

    def test_dependency_not_ready_code(self):
        exc = DependencyNotReadyError("wait", request_id=3, reason="primary_pending")

        assert isinstance(exc, ClaimRejectedError)
        assert exc.error_code == ErrorCode.DEPENDENCY_ERROR


class TestOtherErrors:

    def test_duplicate_error_details(self):
        exc = DuplicateError("dup", resource_type="request", resource_id="t-1")
        assert exc.error_code == ErrorCode.RESOURCE_ALREADY_EXISTS
        assert exc.details == {"resource_type": "request", "resource_id": "t-1"}

    def test_validation_error_value_stringified(self):
        exc = ValidationError("bad", field="limit", value=9000)
        assert exc.details == {"field": "limit", "value": "9000"}

    def test_execution_failed_error_details(self):
        exc = ExecutionFailedError("sheet is read-only", target_id="t-1")
        assert exc.error_code == ErrorCode.EXECUTION_ERROR
        assert exc.details == {"target_id": "t-1"}
