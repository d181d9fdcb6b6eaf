"""Solana chain adapter speaking JSON-RPC over httpx."""

import logging
from collections.abc import Callable
from typing import Any

import base58

from defi_intel.chains.base import ChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, InvalidAddressError, RPCError
from defi_intel.core.models import ChainInfo, Ecosystem, TokenBalance, TokenInfo
from defi_intel.data import get_native_sentinel, load_chains
from defi_intel.rpc import JsonRpcClient

logger = logging.getLogger(__name__)

NATIVE_MINT = get_native_sentinel(Ecosystem.SOLANA)
SPL_TOKEN_PROGRAM_OWNERS = {
    "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
    "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb",
}


class SolanaChainAdapter(ChainAdapter):
    """
    Adapter for Solana clusters.

    The wrapped SOL mint ``So11111111111111111111111111111111111111112`` is
    treated as the native asset and resolves to lamport balances.

    Parameters
    ----------
    chains : list[ChainInfo] | None
        Clusters to serve (defaults to the static Solana entries)
    config : AppConfig | None
        RPC overrides and timeouts
    client_factory : Callable[[ChainInfo, str], JsonRpcClient] | None
        Builds a client for a chain and URL (tests inject mock transports)

    """

    ecosystem = Ecosystem.SOLANA

    def __init__(
        self,
        chains: list[ChainInfo] | None = None,
        config: AppConfig | None = None,
        client_factory: Callable[[ChainInfo, str], JsonRpcClient] | None = None,
    ) -> None:
        super().__init__(chains if chains is not None else load_chains(Ecosystem.SOLANA), config)
        factory = client_factory or self._make_client
        self._clients = {chain.id: factory(chain, self.config.rpc_url_for(chain)) for chain in self.get_supported_chains()}

    def _make_client(self, chain: ChainInfo, rpc_url: str) -> JsonRpcClient:
        return JsonRpcClient(
            chain.id,
            rpc_url,
            timeout=self.config.rpc_timeout_seconds,
            retry_config=self.retry_config,
        )

    def _client(self, chain_id: str) -> JsonRpcClient:
        client = self._clients.get(chain_id)
        if client is None:
            raise ChainNotSupportedError(chain_id)
        return client

    def is_valid_address(self, chain_id: str, address: str) -> bool:
        if not isinstance(address, str) or not 32 <= len(address) <= 44:
            return False
        try:
            return len(base58.b58decode(address)) == 32
        except ValueError:
            return False

    def is_native_token(self, chain_id: str, token: str) -> bool:
        return token == NATIVE_MINT

    def get_native_balance(self, chain_id: str, address: str) -> TokenBalance:
        chain = self._chain_or_raise(chain_id)
        self._require_address(chain_id, address)

        result = self._client(chain_id).request("getBalance", [address, {"commitment": "confirmed"}])
        lamports = self._value(chain_id, "getBalance", result)
        return TokenBalance.from_raw(chain.native_token, int(lamports))

    def _get_fungible_balance(self, chain: ChainInfo, address: str, token: str) -> TokenBalance:
        if not self.is_valid_address(chain.id, token):
            raise InvalidAddressError(token, chain.id)

        token_info = self._known_by_address(chain.id, token) or self.metadata_cache.get_or_load(
            chain.id,
            token,
            lambda: self._load_mint_metadata(chain, token),
        )

        result = self._client(chain.id).request(
            "getTokenAccountsByOwner",
            [address, {"mint": token}, {"encoding": "jsonParsed", "commitment": "confirmed"}],
        )
        accounts = self._value(chain.id, "getTokenAccountsByOwner", result) or []

        # No token account for the mint means a zero balance.
        total = 0
        for account in accounts:
            try:
                total += int(account["account"]["data"]["parsed"]["info"]["tokenAmount"]["amount"])
            except (KeyError, TypeError, ValueError) as e:
                raise RPCError(chain.id, f"getTokenAccountsByOwner: malformed token account: {e}") from e
        return TokenBalance.from_raw(token_info, total)

    def _load_mint_metadata(self, chain: ChainInfo, mint: str) -> TokenInfo:
        result = self._client(chain.id).request("getAccountInfo", [mint, {"encoding": "jsonParsed"}])
        account = self._value(chain.id, "getAccountInfo", result)
        if account is None:
            raise RPCError(chain.id, f"getAccountInfo: mint {mint} not found")
        if account.get("owner") not in SPL_TOKEN_PROGRAM_OWNERS:
            raise RPCError(chain.id, f"getAccountInfo: {mint} is not an SPL mint")

        try:
            decimals = int(account["data"]["parsed"]["info"]["decimals"])
        except (KeyError, TypeError, ValueError) as e:
            raise RPCError(chain.id, f"getAccountInfo: unparsed mint {mint}") from e

        # Mint accounts carry no symbol; fall back to a shortened mint.
        short = f"{mint[:4]}...{mint[-4:]}"
        return TokenInfo(symbol=short, name=f"SPL Token {short}", decimals=decimals, address=mint, chain_id=chain.id)

    def _read_token_metadata(self, chain: ChainInfo, token: str) -> TokenInfo | None:
        return self.metadata_cache.get_or_load(chain.id, token, lambda: self._load_mint_metadata(chain, token))

    @staticmethod
    def _value(chain_id: str, method: str, result: Any) -> Any:
        """Unwrap the ``{"context": ..., "value": ...}`` envelope Solana uses for most reads."""
        if not isinstance(result, dict) or "value" not in result:
            raise RPCError(chain_id, f"{method}: unexpected response shape")
        return result["value"]

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
