"""Search orchestration across Polarity integrations."""

from polarity_bot.pipeline.coordinator import LookupCoordinator, LookupOutcome

__all__ = [
    "LookupCoordinator",
    "LookupOutcome",
]
