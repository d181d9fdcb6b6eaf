"""Plugins exposing agent tools."""

from defi_intel.plugins.balances import BalancesPlugin
from defi_intel.plugins.base import BasePlugin, DefiPlugin, ToolDefinition, ToolResult
from defi_intel.plugins.wallet_intelligence import WalletIntelligencePlugin
from defi_intel.plugins.yield_finder import YieldFinderPlugin

__all__ = [
    "BalancesPlugin",
    "BasePlugin",
    "DefiPlugin",
    "ToolDefinition",
    "ToolResult",
    "WalletIntelligencePlugin",
    "YieldFinderPlugin",
]
