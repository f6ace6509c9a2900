"""Timing utilities for DepHealth runs."""

import functools
import inspect
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar
from rich.console import Console
from rich.table import Table

F = TypeVar('F', bound=Callable[..., Any])

BENCHMARK_ENV_VAR = "DEPHEALTH_VERBOSE_BENCHMARK"


@dataclass
class PerformanceMetrics:
    """One measured operation."""

    function_name: str
    execution_time: float


class PerformanceMonitor:
    """Collects wall-clock timings of named operations."""

    def __init__(self) -> None:
        self.metrics: List[PerformanceMetrics] = []

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Time the enclosed block and record it under ``name``.

        Args:
            name: Name of the operation being measured

        Yields:
            None
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.metrics.append(PerformanceMetrics(name, time.perf_counter() - start_time))

    def get_summary(self) -> Dict[str, Any]:
        """Aggregate the recorded timings.

        Returns:
            Counts and totals, or an empty dict when nothing was measured
        """
        if not self.metrics:
            return {}

        times = [m.execution_time for m in self.metrics]
        return {
            "total_executions": len(times),
            "total_time": sum(times),
            "average_time": sum(times) / len(times),
            "slowest_time": max(times),
            "metrics": list(self.metrics),
        }

    def print_summary(self, console: Optional[Console] = None) -> None:
        summary = self.get_summary()
        if not summary:
            return

        table = Table(title="Performance Summary")
        table.add_column("Operation", style="cyan")
        table.add_column("Time", style="green", justify="right")

        for metric in summary["metrics"]:
            table.add_row(metric.function_name, f"{metric.execution_time:.4f}s")
        table.add_section()
        table.add_row("Average", f"{summary['average_time']:.4f}s")
        table.add_row("Slowest", f"{summary['slowest_time']:.4f}s")

        (console or Console()).print(table)


def _report(name: str, elapsed: float) -> None:
    if os.environ.get(BENCHMARK_ENV_VAR):
        logging.getLogger("Performance").info(f"{name} took {elapsed:.4f} seconds")


def benchmark(func: F) -> F:
    """Log the duration of each call when DEPHEALTH_VERBOSE_BENCHMARK is set.

    Works on both plain functions and coroutine functions.
    """
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _report(func.__name__, time.perf_counter() - start_time)
        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            _report(func.__name__, time.perf_counter() - start_time)
    return wrapper  # type: ignore[return-value]
