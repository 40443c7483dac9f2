"""Normalization and grouping of integration lookup results."""

from polarity_bot.results.grouping import EntityGrouper, group_results
from polarity_bot.results.normalize import enrich, enrich_all, reduce_object

__all__ = [
    "EntityGrouper",
    "enrich",
    "enrich_all",
    "group_results",
    "reduce_object",
]
