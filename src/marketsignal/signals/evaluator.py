"""Five-rule majority vote over a market snapshot.

Every rule casts exactly one vote. Comparisons are strict, so a value sitting
on a threshold falls into the rule's fallback branch.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from marketsignal.domain.models import IndicatorVote, MarketSnapshot, Signal, SignalTally, Vote

RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
VOLATILITY_CALM = 20.0
GDP_GROWTH_HEALTHY = 2.5
TREASURY_YIELD_LOW = 4.5


def trend_vote(snapshot: MarketSnapshot) -> Vote:
    """Price above the 200-day moving average is a long-term uptrend."""
    if snapshot.index.price > snapshot.index.moving_average_200:
        return Vote.BULLISH
    return Vote.BEARISH


def momentum_vote(snapshot: MarketSnapshot) -> Vote:
    """Oversold RSI is a buying opportunity, overbought a selling signal."""
    rsi = snapshot.index.rsi
    if rsi < RSI_OVERSOLD:
        return Vote.BULLISH
    if rsi > RSI_OVERBOUGHT:
        return Vote.BEARISH
    return Vote.NEUTRAL


def volatility_vote(snapshot: MarketSnapshot) -> Vote:
    if snapshot.volatility_index.price < VOLATILITY_CALM:
        return Vote.BULLISH
    return Vote.BEARISH


def growth_vote(snapshot: MarketSnapshot) -> Vote:
    if snapshot.gdp_growth_percent > GDP_GROWTH_HEALTHY:
        return Vote.BULLISH
    return Vote.BEARISH


def rates_vote(snapshot: MarketSnapshot) -> Vote:
    if snapshot.treasury_yield.yield_percent < TREASURY_YIELD_LOW:
        return Vote.BULLISH
    return Vote.BEARISH


RULES: tuple[tuple[str, Callable[[MarketSnapshot], Vote]], ...] = (
    ("trend", trend_vote),
    ("momentum", momentum_vote),
    ("volatility", volatility_vote),
    ("growth", growth_vote),
    ("rates", rates_vote),
)


def evaluate_votes(snapshot: MarketSnapshot) -> list[IndicatorVote]:
    """Return the vote cast by each rule, in rule order."""
    return [IndicatorVote(rule=name, vote=rule(snapshot)) for name, rule in RULES]


def tally_votes(votes: Sequence[IndicatorVote]) -> SignalTally:
    """Count votes and resolve the overall recommendation."""
    bullish = sum(1 for item in votes if item.vote is Vote.BULLISH)
    bearish = sum(1 for item in votes if item.vote is Vote.BEARISH)
    neutral = sum(1 for item in votes if item.vote is Vote.NEUTRAL)
    return SignalTally(
        bullish=bullish,
        bearish=bearish,
        neutral=neutral,
        overall=classify_overall(bullish, bearish),
    )


def classify_overall(bullish: int, bearish: int) -> Signal:
    """Strict majority between bullish and bearish votes; ties hold."""
    if bullish > bearish:
        return Signal.BUY
    if bearish > bullish:
        return Signal.SELL
    return Signal.HOLD


def evaluate(snapshot: MarketSnapshot) -> SignalTally:
    """Classify a validated snapshot into a signal tally."""
    return tally_votes(evaluate_votes(snapshot))
