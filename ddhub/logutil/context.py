"""
Contextual logging with correlation ID and timing support.

Every message emitted through ``clogger`` carries the correlation ID of the
request being served (the API Gateway request id, or a fresh UUID) and the
milliseconds elapsed since the request started. Filtering CloudWatch by
``correlation_id`` shows the full timeline of one sync run even when many
runs overlap.
"""

import time
from contextvars import ContextVar
from typing import Any, Dict, Optional

from ddhub.logutil.config import logger

correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
request_start_time: ContextVar[Optional[float]] = ContextVar(
    "request_start_time", default=None
)

__all__ = ["correlation_id", "request_start_time", "ContextualLogger", "clogger"]


# -----------------------------------------------------------------------------
# Contextual Logger with Correlation ID Support
# -----------------------------------------------------------------------------
class ContextualLogger:
    """
    Wrapper around loguru logger that automatically injects correlation_id and timing.
    Provides the same interface as loguru logger but with enhanced context.
    """

    def _enrich_message(self, msg: str) -> str:
        """Add correlation ID prefix if available."""
        cid = correlation_id.get()
        if cid:
            return f"[{cid[:8]}] {msg}"
        return msg

    def _add_context(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build context dict with correlation_id and elapsed time."""
        ctx = extra.copy() if extra else {}
        cid = correlation_id.get()
        start = request_start_time.get()

        if cid:
            ctx["correlation_id"] = cid
        if start:
            ctx["elapsed_ms"] = int((time.time() - start) * 1000)

        return ctx

    def _log(self, level: str, msg: str, extra: Optional[Dict[str, Any]], **kwargs: Any) -> None:
        # depth=2 attributes the record to the caller, not this wrapper
        getattr(logger.opt(depth=2).bind(**self._add_context(extra)), level)(
            self._enrich_message(msg), **kwargs
        )

    def info(self, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log("info", msg, extra, **kwargs)

    def debug(self, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log("debug", msg, extra, **kwargs)

    def warning(self, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log("warning", msg, extra, **kwargs)

    def error(self, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log("error", msg, extra, **kwargs)

    def exception(self, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log("exception", msg, extra, **kwargs)


clogger = ContextualLogger()
