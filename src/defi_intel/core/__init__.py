"""Core functionality including models, errors, fan-out, and the aggregation engines."""

from defi_intel.core.aggregator import PositionAggregator
from defi_intel.core.errors import (
    AggregatorError,
    ChainNotSupportedError,
    DefiError,
    InvalidAddressError,
    InvalidInputError,
    RegistryError,
    RPCError,
    TokenNotFoundError,
    ToolNameError,
)
from defi_intel.core.fanout import IsolatedTask, gather_isolated
from defi_intel.core.models import (
    ChainInfo,
    Ecosystem,
    PositionAsset,
    PositionKind,
    ProtocolPosition,
    RankedOpportunity,
    RiskLevel,
    TokenBalance,
    TokenInfo,
    WalletScanReport,
    YieldOpportunity,
    YieldRanking,
)
from defi_intel.core.yields import YieldRanker

__all__ = [
    "AggregatorError",
    "ChainInfo",
    "ChainNotSupportedError",
    "DefiError",
    "Ecosystem",
    "InvalidAddressError",
    "InvalidInputError",
    "IsolatedTask",
    "PositionAggregator",
    "PositionAsset",
    "PositionKind",
    "ProtocolPosition",
    "RPCError",
    "RankedOpportunity",
    "RegistryError",
    "RiskLevel",
    "TokenBalance",
    "TokenInfo",
    "TokenNotFoundError",
    "ToolNameError",
    "WalletScanReport",
    "YieldOpportunity",
    "YieldRanker",
    "YieldRanking",
    "gather_isolated",
]
