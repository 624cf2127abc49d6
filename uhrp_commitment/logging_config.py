"""
Logging configuration for the UHRP commitment verifier.

Provides structured JSON logging of evaluation events. Events are emitted
at the pipeline boundary (after each check, after each decision) and are
never consulted for control flow. Signature bytes and key material are
never logged.
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Context variable for correlating the events of a single evaluation
evaluation_id_var: ContextVar[str] = ContextVar('evaluation_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        evaluation_id = evaluation_id_var.get()
        if evaluation_id:
            log_data["evaluation_id"] = evaluation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


class VerificationLogger:
    """
    Logger for commitment evaluation events.

    Each method emits one event with its fields attached as
    ``record.extra_fields`` for the StructuredFormatter.
    """

    def __init__(self, name: str = "uhrp_commitment.verification"):
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return

        extra = {
            "event_type": event_type,
            "evaluation_id": evaluation_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def check_evaluated(
        self,
        check_id: str,
        field_index: Optional[int],
        passed: bool,
        failure_kind: Optional[str] = None
    ) -> None:
        """Log the outcome of a single check."""
        self._log(
            logging.DEBUG,
            "CHECK_EVALUATED",
            check_id=check_id,
            field_index=field_index,
            result="PASS" if passed else "FAIL",
            failure_kind=failure_kind,
            message=f"{check_id} {'passed' if passed else 'failed'}"
        )

    def script_malformed(self, reason: str, script_length: Optional[int]) -> None:
        """Log a script that could not be decoded."""
        self._log(
            logging.WARNING,
            "SCRIPT_MALFORMED",
            reason=reason,
            script_length=script_length,
            message=f"Malformed script: {reason}"
        )

    def commitment_decision(
        self,
        valid: bool,
        failure_kind: Optional[str] = None,
        content_hash: Optional[str] = None,
        checks_run: int = 0
    ) -> None:
        """Log the final verdict for a commitment."""
        level = logging.INFO if valid else logging.WARNING
        self._log(
            level,
            "COMMITMENT_DECISION",
            valid=valid,
            failure_kind=failure_kind,
            content_hash=content_hash,
            checks_run=checks_run,
            message="Commitment valid" if valid else f"Commitment rejected: {failure_kind}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # stderr keeps stdout free for CLI output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def set_evaluation_id(evaluation_id: Optional[str] = None) -> str:
    """
    Set the evaluation ID for the current context.

    Args:
        evaluation_id: ID to set, or None to generate one

    Returns:
        The evaluation ID that was set
    """
    if evaluation_id is None:
        evaluation_id = str(uuid.uuid4())
    evaluation_id_var.set(evaluation_id)
    return evaluation_id


def get_evaluation_id() -> str:
    """Get the current evaluation ID."""
    return evaluation_id_var.get()


@contextmanager
def evaluation_context() -> Iterator[str]:
    """
    Bind an evaluation ID for the duration of one evaluation.

    An ID the caller already set with set_evaluation_id() is kept, so a
    caller can correlate several evaluations. Otherwise a fresh ID is bound
    and the previous value is restored on exit.
    """
    current = evaluation_id_var.get()
    if current:
        yield current
        return

    token = evaluation_id_var.set(str(uuid.uuid4()))
    try:
        yield evaluation_id_var.get()
    finally:
        evaluation_id_var.reset(token)


# Global verification logger instance
verification_log = VerificationLogger()
