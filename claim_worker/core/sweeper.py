"""
Sweep controller.

Drives scan, validate, claim, execute and settle cycles for one worker
process. Each claim attempt owns exactly one database transaction; the
controller itself keeps no state that must survive a crash.
"""
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from claim_worker.exceptions import ClaimRejectedError, ExecutionFailedError
from claim_worker.executors.base import WorkExecutor
from claim_worker.schemas import (
    ClaimedGroup, DependencyVerdict, ExecutionResult, FailedPrimaryPolicy
)
from claim_worker.services.scanner_service import scan_next_request, MIN_CURSOR
from claim_worker.services.dependency_service import ensure_dependency_ready
from claim_worker.services.claim_service import claim_request_group
from claim_worker.services.settlement_service import settle_claim
from claim_worker.utils.logging import get_context_logger
from claim_worker.utils.transaction import claim_transaction
from utils.telemetry import perf_timer

logger = get_context_logger("sweeper")


class SweepState(str, Enum):
    """Controller states."""
    IDLE = "idle"
    SCANNING = "scanning"
    CLAIMING = "claiming"
    EXECUTING = "executing"
    SETTLING = "settling"


class AttemptStatus(str, Enum):
    EXHAUSTED = "exhausted"
    CLAIMED = "claimed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one claim attempt."""
    status: AttemptStatus
    next_cursor: int
    request_id: Optional[int] = None
    succeeded: Optional[bool] = None
    settled: int = 0
    reason: Optional[str] = None


@dataclass
class SweepStats:
    """Counters for one pass from the minimum cursor to exhaustion."""
    scanned: int = 0
    claimed: int = 0
    skipped: int = 0
    completed: int = 0
    failed: int = 0
    settled_requests: int = 0


@dataclass
class DrainStats:
    """Counters accumulated until a sweep makes no claims."""
    sweeps: int = 0
    claimed: int = 0
    skipped: int = 0
    completed: int = 0
    failed: int = 0
    settled_requests: int = 0
    history: list = field(default_factory=list)

    def add(self, sweep: SweepStats) -> None:
        self.sweeps += 1
        self.claimed += sweep.claimed
        self.skipped += sweep.skipped
        self.completed += sweep.completed
        self.failed += sweep.failed
        self.settled_requests += sweep.settled_requests
        self.history.append(sweep)


class SweepController:
    """
    Per-process claim loop.

    A sweep scans from the minimum cursor upwards. A rejected claim moves the
    cursor past the scanned row; a successful claim leaves it in place. The
    controller only goes idle after a complete sweep that claimed nothing,
    since a claim made here may have caused other workers to skip rows.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        executor: WorkExecutor,
        failed_primary_policy: FailedPrimaryPolicy = FailedPrimaryPolicy.ERROR,
        on_state_change: Optional[Callable[[SweepState, SweepState], None]] = None
    ):
        self.session_factory = session_factory
        self.executor = executor
        self.failed_primary_policy = FailedPrimaryPolicy(failed_primary_policy)
        self.on_state_change = on_state_change
        self._state = SweepState.IDLE
        self._stop = threading.Event()

    @property
    def state(self) -> SweepState:
        return self._state

    def _set_state(self, new_state: SweepState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        logger.debug(f"State {old_state.value} -> {new_state.value}")
        if self.on_state_change is not None:
            self.on_state_change(old_state, new_state)

    def request_stop(self) -> None:
        """Finish the current attempt, then end the sweep."""
        self._stop.set()

    def reset_stop(self) -> None:
        self._stop.clear()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def attempt_claim(self, cursor: int = MIN_CURSOR) -> AttemptOutcome:
        """
        Run one scan/claim/settle cycle in a single transaction.

        Args:
            cursor: Exclusive lower bound for the scan

        Returns:
            AttemptOutcome; next_cursor is the scanned id after a skip

        Raises:
            DatabaseError: If the ledger cannot be read or written
        """
        trace_id = str(uuid.uuid4())
        scanned_id = None
        db = self.session_factory()
        try:
            with claim_transaction(db, trace_id=trace_id):
                self._set_state(SweepState.SCANNING)
                request = scan_next_request(db, cursor, trace_id=trace_id)
                if request is None:
                    return AttemptOutcome(AttemptStatus.EXHAUSTED, next_cursor=cursor)
                scanned_id = request.id

                self._set_state(SweepState.CLAIMING)
                verdict = ensure_dependency_ready(
                    db, request, self.failed_primary_policy, trace_id=trace_id
                )
                group = claim_request_group(db, request, trace_id=trace_id)

                if verdict == DependencyVerdict.PRIMARY_FAILED:
                    succeeded = False
                    detail = f"primary request for target {group.target_id} settled as error"
                else:
                    self._set_state(SweepState.EXECUTING)
                    succeeded, detail = self._execute(group, trace_id)

                self._set_state(SweepState.SETTLING)
                settled = settle_claim(
                    db, group.claim_owner, succeeded, error_detail=detail, trace_id=trace_id
                )
                return AttemptOutcome(
                    AttemptStatus.CLAIMED,
                    next_cursor=cursor,
                    request_id=scanned_id,
                    succeeded=succeeded,
                    settled=settled
                )
        except ClaimRejectedError as e:
            next_cursor = scanned_id if scanned_id is not None else cursor
            logger.info(
                f"Skipped request {scanned_id}: {e.message}",
                extra={"trace_id": trace_id, "reason": e.reason}
            )
            return AttemptOutcome(
                AttemptStatus.SKIPPED,
                next_cursor=next_cursor,
                request_id=scanned_id,
                reason=e.reason
            )
        finally:
            db.close()

    def _execute(self, group: ClaimedGroup, trace_id: str) -> Tuple[bool, Optional[str]]:
        timer_data = {
            "trace_id": trace_id,
            "target_id": group.target_id,
            "request_ids": group.request_ids,
        }
        try:
            with perf_timer("EXECUTOR", "execute", timer_data):
                result = self.executor.execute(group.target_id, group.kind, list(group.requests))
        except ExecutionFailedError as e:
            logger.warning(
                f"Executor failed for target {group.target_id}: {e.message}",
                extra={"trace_id": trace_id}
            )
            return False, e.message
        except Exception as e:
            logger.exception(
                f"Executor raised for target {group.target_id}",
                extra={"trace_id": trace_id}
            )
            return False, f"{type(e).__name__}: {str(e)}"

        if isinstance(result, ExecutionResult):
            return result.succeeded, (None if result.succeeded else result.detail)
        if isinstance(result, bool):
            return result, (None if result else "executor reported failure")
        return False, f"executor returned unsupported result {type(result).__name__}"

    def run_sweep(self) -> SweepStats:
        """One pass from the minimum cursor until nothing claimable remains."""
        stats = SweepStats()
        cursor = MIN_CURSOR
        while not self._stop.is_set():
            outcome = self.attempt_claim(cursor)
            if outcome.status == AttemptStatus.EXHAUSTED:
                break

            stats.scanned += 1
            if outcome.status == AttemptStatus.CLAIMED:
                stats.claimed += 1
                stats.settled_requests += outcome.settled
                if outcome.succeeded:
                    stats.completed += 1
                else:
                    stats.failed += 1
            else:
                stats.skipped += 1
                cursor = outcome.next_cursor

        logger.debug(
            f"Sweep finished: scanned={stats.scanned} claimed={stats.claimed} "
            f"skipped={stats.skipped}"
        )
        return stats

    def drain(self) -> DrainStats:
        """Repeat sweeps until one claims nothing, then go idle."""
        totals = DrainStats()
        try:
            while not self._stop.is_set():
                with perf_timer("SWEEP", "run_sweep", {"sweep": totals.sweeps + 1}, level="debug"):
                    sweep = self.run_sweep()
                totals.add(sweep)
                if sweep.claimed == 0:
                    break
        finally:
            self._set_state(SweepState.IDLE)

        if totals.claimed:
            logger.info(
                f"Backlog drained: sweeps={totals.sweeps} claimed={totals.claimed} "
                f"completed={totals.completed} failed={totals.failed} skipped={totals.skipped}"
            )
        return totals
