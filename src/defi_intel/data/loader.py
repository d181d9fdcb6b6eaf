"""Chain and token table loader."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from defi_intel.core.models import ChainInfo, Ecosystem, TokenInfo

DATA_DIR = Path(__file__).parent


@lru_cache(maxsize=None)
def _load_yaml(filename: str) -> dict[str, Any]:
    with open(DATA_DIR / filename, encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_chain_table() -> dict[str, Any]:
    """
    Load the raw chain table from chains.yaml.

    Returns
    -------
    dict[str, Any]
        Parsed YAML including 'sentinels' and 'chains'

    """
    return _load_yaml("chains.yaml")


def get_native_sentinel(ecosystem: Ecosystem) -> str | None:
    """
    Get the reserved identifier that denotes the native asset of an ecosystem.

    Cosmos has no global sentinel; each chain's native denom plays that role.

    Parameters
    ----------
    ecosystem : Ecosystem
        Ecosystem tag

    Returns
    -------
    str | None
        Sentinel address/mint, or None for Cosmos

    """
    sentinels = load_chain_table()["sentinels"]
    return {
        Ecosystem.EVM: sentinels["evm_native"],
        Ecosystem.SOLANA: sentinels["solana_native_mint"],
    }.get(ecosystem)


def load_chains(ecosystem: Ecosystem | None = None) -> list[ChainInfo]:
    """
    Build ChainInfo descriptors from the static table.

    Parameters
    ----------
    ecosystem : Ecosystem | None
        Restrict to one ecosystem, or None for all

    Returns
    -------
    list[ChainInfo]
        Chains in table order

    """
    chains = []
    for chain_id, entry in load_chain_table()["chains"].items():
        chain_ecosystem = Ecosystem(entry["ecosystem"])
        if ecosystem is not None and chain_ecosystem != ecosystem:
            continue

        native = dict(entry["native_token"])
        native.setdefault("address", get_native_sentinel(chain_ecosystem))
        chains.append(
            ChainInfo(
                id=chain_id,
                name=entry["name"],
                ecosystem=chain_ecosystem,
                native_chain_id=entry["native_chain_id"],
                native_token=TokenInfo(chain_id=chain_id, **native),
                rpc_url=entry["rpc_url"],
                explorer_url=entry.get("explorer_url"),
            )
        )
    return chains


def get_all_supported_chains() -> list[str]:
    """
    Get list of all chain ids in the static table.

    Returns
    -------
    list[str]
        Chain ids

    """
    return list(load_chain_table()["chains"].keys())


def load_known_tokens(chain_id: str) -> dict[str, TokenInfo]:
    """
    Get the well-known tokens for a chain keyed by upper-case symbol.

    Parameters
    ----------
    chain_id : str
        Chain id

    Returns
    -------
    dict[str, TokenInfo]
        Symbol to token mapping (empty for chains without a table)

    """
    entries = _load_yaml("tokens.yaml").get(chain_id) or {}
    return {
        symbol: TokenInfo(symbol=symbol, chain_id=chain_id, **fields)
        for symbol, fields in entries.items()
    }
