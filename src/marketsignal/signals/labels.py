"""Per-metric status labels shown next to each metric.

These bands are independent of the five-rule tally and never count as votes.
"""

from __future__ import annotations

from marketsignal.domain.models import MarketSnapshot, RsiZone, Vote

PE_EXPENSIVE = 30.0
PE_CHEAP = 20.0
VOLATILITY_CALM = 20.0
VOLATILITY_FEARFUL = 30.0
TREASURY_YIELD_LOW = 4.5
GDP_GROWTH_HEALTHY = 2.5


def index_status(change: float) -> Vote:
    return Vote.BULLISH if change >= 0 else Vote.BEARISH


def moving_average_status(price: float, moving_average_200: float) -> Vote:
    return Vote.BULLISH if price > moving_average_200 else Vote.BEARISH


def price_to_earnings_status(price_to_earnings: float) -> Vote:
    """High multiples read as overvalued, low ones as undervalued."""
    if price_to_earnings > PE_EXPENSIVE:
        return Vote.BEARISH
    if price_to_earnings < PE_CHEAP:
        return Vote.BULLISH
    return Vote.NEUTRAL


def volatility_status(price: float) -> Vote:
    """Low VIX is complacency, very high VIX is fear and a potential entry."""
    if price < VOLATILITY_CALM:
        return Vote.BULLISH
    if price > VOLATILITY_FEARFUL:
        return Vote.NEUTRAL
    return Vote.BEARISH


def treasury_status(yield_percent: float) -> Vote:
    return Vote.BULLISH if yield_percent < TREASURY_YIELD_LOW else Vote.BEARISH


def gdp_status(growth_percent: float) -> Vote:
    return Vote.BULLISH if growth_percent > GDP_GROWTH_HEALTHY else Vote.BEARISH


def rsi_zone(rsi: float) -> RsiZone:
    """Gauge band; inclusive at 30 and 70, unlike the momentum vote."""
    if rsi >= 70.0:
        return RsiZone.OVERBOUGHT
    if rsi <= 30.0:
        return RsiZone.OVERSOLD
    return RsiZone.NEUTRAL


def metric_statuses(snapshot: MarketSnapshot) -> dict[str, Vote]:
    """Return the display status of every metric card."""
    return {
        "index": index_status(snapshot.index.change),
        "moving_average_200": moving_average_status(
            snapshot.index.price, snapshot.index.moving_average_200
        ),
        "price_to_earnings": price_to_earnings_status(snapshot.index.price_to_earnings),
        "volatility_index": volatility_status(snapshot.volatility_index.price),
        "treasury_yield": treasury_status(snapshot.treasury_yield.yield_percent),
        "gdp_growth": gdp_status(snapshot.gdp_growth_percent),
        "semiconductor_index": Vote.NEUTRAL,
    }
