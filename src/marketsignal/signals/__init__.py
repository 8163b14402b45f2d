"""Signal evaluation and display classification."""

from .evaluator import classify_overall, evaluate, evaluate_votes, tally_votes
from .labels import metric_statuses, rsi_zone

__all__ = [
    "classify_overall",
    "evaluate",
    "evaluate_votes",
    "metric_statuses",
    "rsi_zone",
    "tally_votes",
]
