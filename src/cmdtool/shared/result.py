"""Result objects returned by cmdtool operations."""

from dataclasses import dataclass


@dataclass
class WalkSummary:
    """Counters collected while walking one XML source.

    Attributes:
        source: Descriptive name of the input (file name or ``<string>``)
        elements: Number of element-start events seen
        character_runs: Number of characters-hook invocations
        max_depth: Deepest trail length reached
        processing_time_ms: Wall-clock traversal time
    """

    source: str
    elements: int = 0
    character_runs: int = 0
    max_depth: int = 0
    processing_time_ms: float = 0.0

    @property
    def elements_per_second(self) -> float:
        """Element throughput of the traversal."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.elements * 1000.0) / self.processing_time_ms
