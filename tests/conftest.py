from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

import pytest

from marketsignal.data.simulated import demo_snapshot
from marketsignal.domain.models import MarketSnapshot


def build_snapshot(
    price: float = 18245.67,
    moving_average_200: float = 16745.89,
    rsi: float = 65.4,
    volatility: float = 18.45,
    gdp_growth: float = 2.8,
    treasury_yield: float = 4.25,
    price_to_earnings: float = 28.7,
    change: float = 125.43,
) -> MarketSnapshot:
    base = demo_snapshot()
    return replace(
        base,
        index=replace(
            base.index,
            price=price,
            change=change,
            moving_average_200=moving_average_200,
            rsi=rsi,
            price_to_earnings=price_to_earnings,
        ),
        volatility_index=replace(base.volatility_index, price=volatility),
        treasury_yield=replace(base.treasury_yield, yield_percent=treasury_yield),
        gdp_growth_percent=gdp_growth,
    )


@pytest.fixture
def make_snapshot() -> Callable[..., MarketSnapshot]:
    return build_snapshot
