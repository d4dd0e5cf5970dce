# ABOUTME: Logger utilities with context binding and step tracking decorators
# ABOUTME: Provides get_logger plus a source-step timer and a run-scoped logging context

import functools
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, named after the calling module when ``name`` is omitted."""
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")

    return structlog.get_logger(name or "town_scraper")


def generate_operation_id() -> str:
    """Short random id tying together every log line of one scrape run."""
    return uuid.uuid4().hex[:8]


def log_source_step(step_name: str) -> Callable[[F], F]:
    """Decorator to log one observation-source step with timing.

    The decorated coroutine's result is inspected for an ``observations``
    attribute so the completion line carries the yield of the step.

    Args:
        step_name: Name of the step (e.g. "object_graph_scan")

    Returns:
        Decorated async function with step logging
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            step_logger = get_logger(func.__module__).bind(step=step_name, pipeline="town_scrape")
            step_logger.info(f"Starting source step: {step_name}")
            started = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                step_logger.error(
                    f"Failed source step: {step_name}",
                    duration_seconds=round(time.perf_counter() - started, 3),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            observations = getattr(result, "observations", None)
            step_logger.info(
                f"Completed source step: {step_name}",
                duration_seconds=round(time.perf_counter() - started, 3),
                observation_count=len(observations) if observations is not None else None,
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


class LogContext:
    """Binds run-wide context to a logger and reports how the block ended.

    The bound logger is returned from ``__enter__``. Exceptions are logged with
    the elapsed time and always propagate.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger, **context):
        self.logger = logger.bind(**context)
        self.started: float | None = None

    def __enter__(self) -> structlog.stdlib.BoundLogger:
        self.started = time.perf_counter()
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = round(time.perf_counter() - (self.started or time.perf_counter()), 3)
        if exc_type is None:
            self.logger.debug("Run context closed", duration_seconds=elapsed)
        else:
            self.logger.error(
                "Run aborted", duration_seconds=elapsed, error=str(exc_val), error_type=exc_type.__name__
            )
        return False


def with_pipeline_context(pipeline_name: str, **context) -> LogContext:
    """Logging context for one pipeline run, tagged with a fresh operation id.

    Example:
        with with_pipeline_context("town_scrape", url=config.map_url) as logger:
            logger.info("Starting scrape")
    """
    return LogContext(get_logger(), pipeline=pipeline_name, operation_id=generate_operation_id(), **context)
