"""
Structured JSON logging for the fiscal pipeline.

Every record emitted under the ``fiscal_kernel`` logger namespace is written
as one JSON object per line. The envelope is ``ts``, ``level``, ``logger``
and ``message``, followed by the computation context currently bound in
:class:`LogContext`, then any ``extra=`` fields of the call.

Context fields are limited to the computation identity: correlation id,
tax year, user status, ruleset key and fiscal hash. Raw ledger data is
never placed in the context.

Usage::

    from fiscal_kernel.logging_config import LogContext, get_logger

    logger = get_logger("services.dispatcher")
    with LogContext.bind(tax_year="2026", ruleset="FR/2026/artist_author"):
        logger.info("fiscal_computed", extra={"tax_line_count": 9})
"""

__all__ = [
    "LOG_CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO

LOG_CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "tax_year",
    "user_status",
    "ruleset",
    "fiscal_hash",
)

_LOGGER_PREFIX = "fiscal_kernel"

_bound: ContextVar[Mapping[str, str]] = ContextVar("fiscal_log_context", default={})


def _checked(fields: Mapping[str, str | None]) -> dict[str, str]:
    unknown = sorted(set(fields) - set(LOG_CONTEXT_FIELDS))
    if unknown:
        raise KeyError(f"Unknown log context field(s): {', '.join(unknown)}")
    return {name: value for name, value in fields.items() if value is not None}


class LogContext:
    """
    Computation-scoped log fields, held in a single context variable.

    ``set`` overwrites fields for the rest of the current context; ``bind``
    overlays fields for the duration of a ``with`` block and restores the
    previous mapping on exit. ``None`` values leave a field untouched.
    """

    @staticmethod
    def set(**fields: str | None) -> None:
        _bound.set({**_bound.get(), **_checked(fields)})

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_bound.get())

    @staticmethod
    def clear() -> None:
        _bound.set({})

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        token = _bound.set({**_bound.get(), **_checked(fields)})
        try:
            yield LogContext
        finally:
            _bound.reset(token)


# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # FiscalKernelError subclasses keep their diagnostics as public attributes.
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_bound.get(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Return ``fiscal_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``fiscal_kernel`` logger.

    Only the first call has an effect until :func:`reset_logging` runs.
    Records do not propagate to the root logger.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

        if handler is None:
            handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(StructuredFormatter())

        namespace = logging.getLogger(_LOGGER_PREFIX)
        namespace.setLevel(level)
        namespace.propagate = False
        namespace.addHandler(handler)


def reset_logging() -> None:
    """Detach every handler and return the namespace to defaults (tests only)."""
    global _configured
    with _lock:
        _configured = False
        namespace = logging.getLogger(_LOGGER_PREFIX)
        for handler in list(namespace.handlers):
            namespace.removeHandler(handler)
        namespace.setLevel(logging.WARNING)
        namespace.propagate = True
