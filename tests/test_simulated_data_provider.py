from __future__ import annotations

from datetime import UTC, datetime

import pytest

from marketsignal.data.simulated import SimulatedDataProvider, demo_snapshot


def test_simulated_provider_moves_only_the_index_price() -> None:
    stamp = datetime(2025, 3, 1, 14, 0, tzinfo=UTC)
    seed = demo_snapshot()
    provider = SimulatedDataProvider(seed_snapshot=seed, max_move=50.0, seed=7, clock=lambda: stamp)

    snapshot = provider.fetch(None)

    move = snapshot.index.price - seed.index.price
    assert -25.0 <= move <= 25.0
    assert snapshot.index.change == pytest.approx(move)
    assert snapshot.index.change_percent == pytest.approx(move / seed.index.price * 100.0)
    assert snapshot.index.rsi == seed.index.rsi
    assert snapshot.index.moving_average_200 == seed.index.moving_average_200
    assert snapshot.volatility_index == seed.volatility_index
    assert snapshot.history == seed.history
    assert snapshot.captured_at == stamp


def test_simulated_provider_walks_from_previous_snapshot() -> None:
    provider = SimulatedDataProvider(max_move=10.0, seed=1)

    first = provider.fetch(None)
    second = provider.fetch(first)

    assert abs(second.index.price - first.index.price) <= 5.0
    assert second.index.change == pytest.approx(second.index.price - first.index.price)


def test_simulated_provider_is_reproducible_with_seed() -> None:
    first = SimulatedDataProvider(seed=42).fetch(None)
    second = SimulatedDataProvider(seed=42).fetch(None)

    assert first.index.price == second.index.price


def test_simulated_provider_rejects_negative_move() -> None:
    with pytest.raises(ValueError, match="max_move"):
        SimulatedDataProvider(max_move=-1.0)
