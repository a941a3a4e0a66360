"""
Wakeup channel built on PostgreSQL LISTEN/NOTIFY.

The channel is advisory and lossy: a NOTIFY sent while nobody listens is
gone. A listener therefore primes itself on start so that a freshly started
worker always checks for backlog.
"""
import select
import threading
import time
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql import text

from claim_worker.config import WAKE_CHANNEL, validate_channel_name
from claim_worker.utils.logging import get_context_logger

logger = get_context_logger("wake_listener")


def publish_wakeup(db: Session, channel: str = WAKE_CHANNEL) -> None:
    """
    Queue a payload-free wakeup on the session's current transaction.

    PostgreSQL delivers the notification when the transaction commits and
    drops it if the transaction rolls back.
    """
    validate_channel_name(channel)
    db.execute(text("SELECT pg_notify(:channel, '')"), {"channel": channel})


class WakeListener:
    """
    Blocking receiver for wakeup signals.

    Holds one dedicated autocommit connection subscribed to the channel.
    """

    def __init__(
        self,
        connection_factory: Callable[[], Any],
        channel: str = WAKE_CHANNEL,
        poll_interval: float = 1.0
    ):
        """
        Args:
            connection_factory: Returns a DBAPI (psycopg2) connection, or a
                SQLAlchemy pooled connection wrapping one
            channel: Channel name to LISTEN on
            poll_interval: Seconds between stop-flag checks while blocked
        """
        self.channel = validate_channel_name(channel)
        self.poll_interval = poll_interval
        self._connection_factory = connection_factory
        self._raw = None
        self._conn = None
        self._pending = threading.Event()
        self._stopped = threading.Event()

    @property
    def listening(self) -> bool:
        return self._conn is not None

    def start(self) -> None:
        """Prime a wakeup, then subscribe to the channel."""
        self.trigger()

        raw = self._connection_factory()
        conn = getattr(raw, "driver_connection", None) or raw
        conn.autocommit = True
        cursor = conn.cursor()
        try:
            cursor.execute(f'LISTEN "{self.channel}"')
        finally:
            cursor.close()

        self._raw, self._conn = raw, conn
        self._stopped.clear()
        logger.info(f"Listening for wakeups on channel '{self.channel}'")

    def trigger(self) -> None:
        """Wake the next wait() without going through the database."""
        self._pending.set()

    def stop(self) -> None:
        """Make any blocked wait() return False."""
        self._stopped.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until a wakeup arrives.

        Args:
            timeout: Maximum seconds to wait, None to wait until stopped

        Returns:
            True if a wakeup was received, False on timeout or stop
        """
        if self._pending.is_set():
            self._pending.clear()
            return True

        if self._conn is None:
            raise RuntimeError("WakeListener.start() must be called before wait()")

        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._stopped.is_set():
            slice_seconds = self.poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                slice_seconds = min(slice_seconds, remaining)

            readable, _, _ = select.select([self._conn], [], [], slice_seconds)
            if readable and self._drain_notifications():
                return True
            if self._pending.is_set():
                self._pending.clear()
                return True

        return False

    def _drain_notifications(self) -> bool:
        # A burst of NOTIFYs collapses into a single wakeup
        self._conn.poll()
        received = len(self._conn.notifies)
        if received:
            del self._conn.notifies[:]
            logger.debug(f"Received {received} wakeup notification(s)")
        return received > 0

    def close(self) -> None:
        """Unsubscribe and release the connection."""
        if self._conn is None:
            return
        try:
            cursor = self._conn.cursor()
            try:
                cursor.execute("UNLISTEN *")
            finally:
                cursor.close()
            # Pooled connections go back in their default transactional mode
            self._conn.autocommit = False
        except Exception as e:
            logger.warning(f"Error during UNLISTEN: {str(e)}")
        finally:
            try:
                self._raw.close()
            except Exception as e:
                logger.warning(f"Error closing listener connection: {str(e)}")
            self._raw = self._conn = None
            logger.info(f"Stopped listening on channel '{self.channel}'")
