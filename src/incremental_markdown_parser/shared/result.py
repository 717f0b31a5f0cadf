"""Result types shared across parsing layers."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ParseMetrics:
    """Timings (milliseconds), counts and memory figures for one parse call."""

    token_time_ms: float = 0.0
    token_count: int = 0
    node_time_ms: float = 0.0
    node_count: int = 0
    total_time_ms: float = 0.0
    memory_start_bytes: int = 0
    memory_end_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate metric values."""
        if self.token_count < 0:
            raise ValueError("token_count must be >= 0")
        if self.node_count < 0:
            raise ValueError("node_count must be >= 0")

    @property
    def average_time_per_node_ms(self) -> float:
        """Average tree insertion time per processed node."""
        if self.node_count == 0:
            return 0.0
        return self.node_time_ms / self.node_count

    @property
    def memory_delta_bytes(self) -> int:
        """Resident memory change over the parse."""
        return self.memory_end_bytes - self.memory_start_bytes

    def to_dict(self) -> Dict[str, Any]:
        """Nested view grouped by parse phase."""
        return {
            "tokens": {
                "time": self.token_time_ms,
                "count": self.token_count,
            },
            "nodes": {
                "time": self.node_time_ms,
                "count": self.node_count,
                "average_time_per_node": self.average_time_per_node_ms,
            },
            "total": {
                "time": self.total_time_ms,
            },
            "memory": {
                "start_bytes": self.memory_start_bytes,
                "end_bytes": self.memory_end_bytes,
                "delta_bytes": self.memory_delta_bytes,
            },
        }
