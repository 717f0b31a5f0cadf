"""Developer tools for incremental Markdown parsing.

This module provides the metrics collector used by metered parse calls.
"""

from .profiling import PerformanceMonitor, monitor

__all__ = [
    "PerformanceMonitor",
    "monitor",
]
