"""
Timing for storage operations and summaries for sync runs.
"""

import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from ddhub.logutil.context import clogger

__all__ = ["log_operation", "BatchOperationLogger"]


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


@contextmanager
def log_operation(name: str, audit: bool = False, **metadata: Any) -> Iterator[None]:
    """
    Time the wrapped block and log how it ended.

    Writes that change shared state (uploads, deletes, reconciliation) pass
    ``audit=True`` so their completion is logged at INFO; reads stay at DEBUG.

    Usage:
        with log_operation("upload_dashboard", audit=True, artifact_id=aid):
            ...
    """
    start = time.time()
    try:
        yield
    except Exception as e:
        clogger.error(
            f"{name} failed after {_elapsed_ms(start)}ms",
            extra={**metadata, "duration_ms": _elapsed_ms(start), "error_type": type(e).__name__},
        )
        raise

    done = clogger.info if audit else clogger.debug
    done(f"{name} done in {_elapsed_ms(start)}ms", extra={**metadata, "duration_ms": _elapsed_ms(start)})


class BatchOperationLogger:
    """
    Counts per-item outcomes of a sync run and logs one summary at the end.

    Usage:
        with BatchOperationLogger("sync_monitors", total=len(monitors)) as batch:
            for monitor in monitors:
                batch.log_item(monitor["name"], status="failed", error="400 Bad Request")
    """

    def __init__(self, operation_name: str, total: Optional[int] = None):
        self.operation_name = operation_name
        self.total = total
        self.success_count = 0
        self.failure_count = 0
        self._start = time.time()

    @property
    def processed(self) -> int:
        return self.success_count + self.failure_count

    def __enter__(self) -> "BatchOperationLogger":
        self._start = time.time()
        clogger.info(f"{self.operation_name}: {self.total} item(s) queued")
        return self

    def log_item(self, item_name: str, status: str = "success", error: str = "") -> None:
        if status == "success":
            self.success_count += 1
            clogger.debug(f"[{self.processed}/{self.total}] {item_name}: created")
            return

        self.failure_count += 1
        clogger.warning(
            f"[{self.processed}/{self.total}] {item_name}: {status}",
            extra={"item": item_name, "error": error},
        )

    def __exit__(self, exc_type: Optional[type], exc_val: Any, exc_tb: Any) -> None:
        summary = {
            "operation": self.operation_name,
            "duration_ms": _elapsed_ms(self._start),
            "total_items": self.processed,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
        }
        if exc_type is not None:
            clogger.error(
                f"{self.operation_name} aborted after {self.processed} item(s)",
                extra={**summary, "error_type": exc_type.__name__},
            )
            return

        clogger.info(
            f"{self.operation_name}: {self.success_count}/{self.processed} created",
            extra=summary,
        )
