"""Static chain and token tables."""

from defi_intel.data.loader import (
    get_all_supported_chains,
    get_native_sentinel,
    load_chain_table,
    load_chains,
    load_known_tokens,
)

__all__ = [
    "get_all_supported_chains",
    "get_native_sentinel",
    "load_chain_table",
    "load_chains",
    "load_known_tokens",
]
