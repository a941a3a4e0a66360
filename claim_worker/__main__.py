"""Command line entry point: python -m claim_worker"""
# Load environment variables from .env file before anything reads them
from dotenv import load_dotenv

load_dotenv()

import argparse
import os
import socket
import sys

from claim_worker.config import WorkerSettings
from claim_worker.exceptions import BaseAppException
from claim_worker.executors.base import load_executor
from claim_worker.utils.logging import configure_logging, get_context_logger
from claim_worker.version import get_version_string


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="claim_worker",
        description="Claim and execute requests from the request ledger"
    )
    parser.add_argument(
        "--executor",
        help="Work executor as 'package.module:attribute' (overrides WORK_EXECUTOR)"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Drain the current backlog and exit instead of waiting for wakeups"
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the ledger tables before starting"
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--version", action="version", version=get_version_string())
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    worker_id = f"{socket.gethostname()}:{os.getpid()}"
    logger = get_context_logger("claim_worker", worker_id=worker_id)

    try:
        settings = WorkerSettings.from_env()
        executor = load_executor(args.executor or settings.work_executor) \
            if (args.executor or settings.work_executor) else None

        if args.init_db:
            from db.db import init_db
            init_db()

        from claim_worker.worker import build_worker
        worker = build_worker(settings, executor=executor, worker_id=worker_id)

        if args.once:
            stats = worker.run_once()
            logger.info(
                f"Drained once: claimed={stats.claimed} completed={stats.completed} "
                f"failed={stats.failed} skipped={stats.skipped}"
            )
        else:
            worker.run_forever()
    except BaseAppException as e:
        logger.error(f"{e.error_code.name}: {e.message}", extra={"details": e.details})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
