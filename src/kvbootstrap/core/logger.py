import logging
import sys
import contextvars
from typing import Optional

# Context variable to carry the current import run id across the call chain
_RUN_ID: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")


class _RunIdFilter(logging.Filter):
    """Logging filter that injects the run_id from contextvars into the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.run_id = _RUN_ID.get()
        return True


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | run=%(run_id)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _ensure_handler() -> bool:
    """Attach the stdout handler to the root logger once.

    Returns True if the handler was added by this call.
    """
    root = logging.getLogger()
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and any(isinstance(f, _RunIdFilter) for f in h.filters):
            return False

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.addFilter(_RunIdFilter())
    root.addHandler(handler)
    root.setLevel(logging.INFO)
    return True


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure root logger and the kvbootstrap logger.

    Root logger stays at INFO to suppress library noise (httpx, httpcore).
    Only kvbootstrap namespace logs are set to the requested level.

    Args:
        level: Log level for kvbootstrap logs (DEBUG, INFO, WARNING, ERROR).

    Safe to call multiple times; it will not duplicate handlers (idempotent).
    """
    _ensure_handler()
    logging.getLogger("kvbootstrap").setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str = "kvbootstrap") -> logging.Logger:
    """
    Get a module-specific logger writing to stdout with the run id attached.

    Child loggers inherit their level from the ``kvbootstrap`` namespace logger,
    so ``configure_root_logger("DEBUG")`` affects every module at once.
    """
    if _ensure_handler():
        logging.getLogger("kvbootstrap").setLevel(logging.INFO)
    return logging.getLogger(name)


def push_run_id(run_id: Optional[str]) -> Optional[contextvars.Token]:
    """Set the current run id in context and return a token for later reset."""
    if not run_id:
        return None
    return _RUN_ID.set(run_id)


def reset_run_id(token: Optional[contextvars.Token]) -> None:
    """Reset the run id context using the provided token (if any)."""
    if token is None:
        return
    _RUN_ID.reset(token)
