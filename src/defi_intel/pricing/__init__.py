"""Entry cost estimation for yield ranking."""

from defi_intel.pricing.costs import GAS_ESTIMATES, HeuristicCostEstimator

__all__ = [
    "GAS_ESTIMATES",
    "HeuristicCostEstimator",
]
