"""Metrics collected while converting between XML and tree values."""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class ConversionMetrics:
    """Performance metrics for a single decode or encode call."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    events_processed: int = 0
    elements_processed: int = 0
    max_depth: int = 0

    @property
    def elements_per_second(self) -> float:
        """Calculate elements processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.elements_processed * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        """Flatten metrics for use as logging extra data."""
        return asdict(self)
