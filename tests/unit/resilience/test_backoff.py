"""Unit tests for reconnect backoff strategies."""
from __future__ import annotations

import pytest

from notification_sync.resilience.retry import ConstantBackoff, ExponentialBackoff


class TestConstantBackoff:
    def test_same_delay_every_attempt(self) -> None:
        backoff = ConstantBackoff(3.0)
        assert [backoff.compute(n) for n in range(1, 6)] == [3.0] * 5
        assert backoff.delay == 3.0

    def test_default_is_three_seconds(self) -> None:
        assert ConstantBackoff().compute(1) == 3.0

    def test_zero_allowed(self) -> None:
        assert ConstantBackoff(0).compute(4) == 0

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            ConstantBackoff(-1)


class TestExponentialBackoff:
    def test_doubles_until_cap(self) -> None:
        backoff = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
        assert [backoff.compute(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]
