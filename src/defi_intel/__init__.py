"""Cross-ecosystem DeFi intelligence: chain adapters, wallet scanning, and yield ranking."""

from defi_intel.chains import build_default_adapters
from defi_intel.config import AppConfig
from defi_intel.core.aggregator import PositionAggregator
from defi_intel.core.registry import PluginContext, Registry
from defi_intel.core.yields import YieldRanker
from defi_intel.logger import setup_logging

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "PluginContext",
    "PositionAggregator",
    "Registry",
    "YieldRanker",
    "build_default_adapters",
    "setup_logging",
]
