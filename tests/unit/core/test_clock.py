"""
Tests unitaires pour SystemClock et FrozenClock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from scolaris.core import FrozenClock, SystemClock


class TestSystemClock:
    def test_utc_aware(self) -> None:
        assert SystemClock().now().tzinfo is not None


class TestFrozenClock:
    """Tests de l'horloge manuelle."""

    def test_default_start(self) -> None:
        assert FrozenClock().now() == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_stays_frozen(self, clock: FrozenClock) -> None:
        assert clock.now() == clock.now()

    def test_advance_kwargs(self, clock: FrozenClock) -> None:
        start = clock.now()
        clock.advance(minutes=15)
        assert clock.now() - start == timedelta(minutes=15)

    def test_advance_delta(self, clock: FrozenClock) -> None:
        start = clock.now()
        assert clock.advance(timedelta(seconds=30)) == start + timedelta(seconds=30)

    def test_no_going_back(self, clock: FrozenClock) -> None:
        with pytest.raises(ValueError):
            clock.advance(minutes=-1)

    def test_naive_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            FrozenClock(datetime(2024, 1, 1))

    def test_set(self, clock: FrozenClock) -> None:
        moment = datetime(2025, 9, 1, tzinfo=timezone.utc)
        clock.set(moment)
        assert clock.now() == moment
