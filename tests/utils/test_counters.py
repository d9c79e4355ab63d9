"""
Tests for operation counters.
"""

from src.utils.counters import OperationCounters


class TestOperationCounters:
    """Test counter behaviour."""

    def test_unknown_counter_is_zero(self):
        counters = OperationCounters()
        assert counters.get("documents_ingested") == 0

    def test_increment(self):
        """Test increment by one and by amount."""
        counters = OperationCounters()

        counters.increment("chunks_stored")
        counters.increment("chunks_stored", 4)

        assert counters.get("chunks_stored") == 5

    def test_snapshot_is_a_copy(self):
        """Test snapshot does not change with later increments."""
        counters = OperationCounters()
        counters.increment("searches")

        snapshot = counters.snapshot()
        counters.increment("searches")

        assert snapshot == {"searches": 1}
        assert counters.get("searches") == 2

    def test_reset(self):
        """Test reset clears values and restarts the clock."""
        counters = OperationCounters()
        started = counters.started_at
        counters.increment("searches")

        counters.reset()

        assert counters.snapshot() == {}
        assert counters.started_at >= started

    def test_instances_are_independent(self):
        """Test counters are per instance, not shared."""
        first = OperationCounters()
        second = OperationCounters()

        first.increment("searches")

        assert second.get("searches") == 0
