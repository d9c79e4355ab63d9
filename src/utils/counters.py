"""
Operation counters.

Counters are plain instance state owned by whoever constructs them and passed
to the components that report into them. Nothing here is module-level.
"""

from collections import Counter
from datetime import UTC, datetime


class OperationCounters:
    """Named integer counters for a single orchestrator instance."""

    def __init__(self):
        self._counts: Counter[str] = Counter()
        self.started_at = datetime.now(UTC)

    def increment(self, name: str, amount: int = 1) -> None:
        """Add amount to a counter (created at zero on first use)."""
        self._counts[name] += amount

    def get(self, name: str) -> int:
        return self._counts[name]

    def snapshot(self) -> dict[str, int]:
        """Copy of the current counter values."""
        return dict(self._counts)

    def reset(self) -> None:
        self._counts.clear()
        self.started_at = datetime.now(UTC)
