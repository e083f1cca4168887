"""
Health Check Utilities.

Provides a decorator and helpers for health checks with consistent timeout
handling and response formatting.

Usage:
    from shared.utils.health import sync_health_check_with_timeout

    @sync_health_check_with_timeout(timeout=3.0, component="database")
    def check_database_health():
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"dialect": "postgresql"}

    # Returns: HealthCheckResult(status=HEALTHY, component="database", ...)
"""

from __future__ import annotations

import concurrent.futures
import functools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class HealthCheckResult:
    """
    Result of a health check operation.

    Provides consistent structure for all health check responses.
    """
    status: HealthStatus
    component: str
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "status": self.status.value,
            "component": self.component,
        }
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


def sync_health_check_with_timeout(
    timeout: float = 5.0,
    component: str | None = None,
):
    """
    Decorator for synchronous health check functions with timeout protection.

    The check runs in a worker thread so a hung connection cannot block the
    caller for longer than ``timeout`` seconds.

    Args:
        timeout: Maximum time to wait for health check (seconds).
        component: Component name for logging (defaults to function name).

    Returns:
        Decorated function that returns HealthCheckResult.
    """

    def decorator(
        func: Callable[..., dict[str, Any] | None]
    ) -> Callable[..., HealthCheckResult]:
        comp_name = component or func.__name__.replace("check_", "").replace("_health", "")

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> HealthCheckResult:
            start_time = time.perf_counter()
            executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
            try:
                future = executor.submit(func, *args, **kwargs)
                result = future.result(timeout=timeout)

                latency_ms = (time.perf_counter() - start_time) * 1000
                details = result if isinstance(result, dict) else {}

                return HealthCheckResult(
                    status=HealthStatus.HEALTHY,
                    component=comp_name,
                    latency_ms=latency_ms,
                    details=details,
                )
            except concurrent.futures.TimeoutError:
                latency_ms = (time.perf_counter() - start_time) * 1000
                logger.warning(
                    "Health check timeout",
                    component=comp_name,
                    timeout=timeout,
                )
                return HealthCheckResult(
                    status=HealthStatus.UNHEALTHY,
                    component=comp_name,
                    latency_ms=latency_ms,
                    error=f"timeout after {timeout}s",
                )
            except Exception as e:
                latency_ms = (time.perf_counter() - start_time) * 1000
                logger.warning(
                    "Health check failed",
                    component=comp_name,
                    error=str(e),
                )
                return HealthCheckResult(
                    status=HealthStatus.UNHEALTHY,
                    component=comp_name,
                    latency_ms=latency_ms,
                    error=str(e),
                )
            finally:
                # Don't wait for a hung check
                executor.shutdown(wait=False)

        return wrapper
    return decorator


def aggregate_health_results(results: list[HealthCheckResult]) -> dict[str, Any]:
    """
    Aggregate component results into an overall status.

    Returns:
        {"status": "healthy" | "degraded", "components": {name: result_dict}}
    """
    components = {result.component: result.to_dict() for result in results}
    all_healthy = all(result.status == HealthStatus.HEALTHY for result in results)

    return {
        "status": HealthStatus.HEALTHY.value if all_healthy else HealthStatus.DEGRADED.value,
        "components": components,
    }
