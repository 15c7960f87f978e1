"""
Datadog Hub logging infrastructure.

- Structured logging with loguru
- Correlation ID tracking
- Sensitive data masking (Datadog keys, session tokens)
- Request/response logging for Lambda handlers
- Operation timing and batch (sync run) tracking

Usage:
    from ddhub.logutil import clogger, log_lambda_handler

    @log_lambda_handler("POST /sync/monitors")
    def lambda_handler(event, context):
        clogger.info("Starting sync", extra={"mode": "source"})
        ...
"""

from ddhub.logutil.config import logger, setup_logging
from ddhub.logutil.context import clogger, correlation_id, request_start_time
from ddhub.logutil.decorators import log_lambda_handler
from ddhub.logutil.masking import mask_sensitive_data
from ddhub.logutil.operations import BatchOperationLogger, log_operation

setup_logging()

__all__ = [
    "logger",
    "clogger",
    "log_lambda_handler",
    "log_operation",
    "BatchOperationLogger",
    "mask_sensitive_data",
    "correlation_id",
    "request_start_time",
    "setup_logging",
]
