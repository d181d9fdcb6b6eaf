"""Per-ecosystem chain adapters."""

from defi_intel.chains.base import ChainAdapter
from defi_intel.chains.cosmos import CosmosChainAdapter
from defi_intel.chains.evm import EvmChainAdapter
from defi_intel.chains.solana import SolanaChainAdapter
from defi_intel.config import AppConfig


def build_default_adapters(config: AppConfig | None = None) -> list[ChainAdapter]:
    """
    Build one adapter per ecosystem over every chain in the static table.

    Parameters
    ----------
    config : AppConfig | None
        Shared configuration (RPC overrides, timeouts)

    Returns
    -------
    list[ChainAdapter]
        EVM, Solana and Cosmos adapters

    """
    config = config or AppConfig()
    return [
        EvmChainAdapter(config=config),
        SolanaChainAdapter(config=config),
        CosmosChainAdapter(config=config),
    ]


__all__ = [
    "ChainAdapter",
    "CosmosChainAdapter",
    "EvmChainAdapter",
    "SolanaChainAdapter",
    "build_default_adapters",
]
