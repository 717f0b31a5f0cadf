"""Performance metrics collection for parse calls.

Times the tokenizing and tree-building phases of a parse, counts tokens and
processed nodes, and samples the process resident memory with psutil.
"""

import time
from typing import Optional

import psutil

from incremental_markdown_parser.shared.logging import get_logger
from incremental_markdown_parser.shared.result import ParseMetrics


class PerformanceMonitor:
    """Collects metrics for one parse at a time.

    Not reentrant: ``start`` resets every counter.

    Examples:
        >>> monitor = PerformanceMonitor()
        >>> monitor.start()
        >>> monitor.finish_tokenizing(3)
        >>> monitor.node_processed()
        >>> monitor.get_metrics().node_count
        1
    """

    def __init__(self, enable_memory_tracking: bool = True) -> None:
        """Initialize performance monitor.

        Args:
            enable_memory_tracking: Whether to sample process memory
        """
        self.enable_memory_tracking = enable_memory_tracking
        self.logger = get_logger(__name__, None, "performance_monitor")
        self._process: Optional[psutil.Process] = (
            psutil.Process() if enable_memory_tracking else None
        )
        self._reset()

    def _reset(self) -> None:
        self._token_start = 0.0
        self._node_start: Optional[float] = None
        self._token_count = 0
        self._node_count = 0
        self._memory_start = 0

    def _memory(self) -> int:
        return self._process.memory_info().rss if self._process is not None else 0

    def start(self) -> None:
        """Begin measuring a new parse."""
        self._reset()
        self._memory_start = self._memory()
        self._token_start = time.perf_counter()

    def finish_tokenizing(self, token_count: int) -> None:
        """Mark the end of tokenizing and the start of tree building."""
        self._token_count = token_count
        self._node_start = time.perf_counter()

    def node_processed(self) -> None:
        """Count one node folded into the tree."""
        self._node_count += 1

    def get_metrics(self) -> ParseMetrics:
        """Snapshot the metrics of the current parse.

        Calling this before ``finish_tokenizing`` attributes all elapsed time
        to tokenizing.
        """
        end = time.perf_counter()
        node_start = self._node_start if self._node_start is not None else end

        metrics = ParseMetrics(
            token_time_ms=(node_start - self._token_start) * 1000,
            token_count=self._token_count,
            node_time_ms=(end - node_start) * 1000,
            node_count=self._node_count,
            total_time_ms=(end - self._token_start) * 1000,
            memory_start_bytes=self._memory_start,
            memory_end_bytes=self._memory(),
        )

        self.logger.debug(
            "Collected parse metrics",
            extra={
                "token_count": metrics.token_count,
                "node_count": metrics.node_count,
                "total_time_ms": metrics.total_time_ms,
            }
        )
        return metrics


# Shared collector used by parse_with_metrics
monitor = PerformanceMonitor()
