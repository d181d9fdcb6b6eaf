"""Base chain adapter class with the ecosystem-independent contract."""

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, InvalidAddressError
from defi_intel.core.models import ChainInfo, Ecosystem, TokenBalance, TokenInfo
from defi_intel.data import load_known_tokens
from defi_intel.rpc import RetryConfig, TokenMetadataCache

logger = logging.getLogger(__name__)


class ChainAdapter(ABC):
    """
    Abstract base class for per-ecosystem chain adapters.

    Normalizes address validation, balance lookup, and token resolution so
    callers never handle an ecosystem's address format or native-asset
    representation themselves. Network clients are built once per supported
    chain in ``__init__`` and shared by every call.

    Attributes
    ----------
    ecosystem : Ecosystem
        Ecosystem served (must be set in subclass)

    Parameters
    ----------
    chains : list[ChainInfo]
        Static chains served by this adapter
    config : AppConfig | None
        RPC overrides, timeouts, and retry settings

    """

    ecosystem: ClassVar[Ecosystem]

    def __init__(self, chains: list[ChainInfo], config: AppConfig | None = None) -> None:
        if not getattr(self, "ecosystem", None):
            msg = f"{self.__class__.__name__} must define 'ecosystem' attribute"
            raise ValueError(msg)

        foreign = [chain.id for chain in chains if chain.ecosystem != self.ecosystem]
        if foreign:
            msg = f"{self.__class__.__name__} cannot serve {self.ecosystem} and {foreign}"
            raise ValueError(msg)

        self.config = config or AppConfig()
        self.retry_config = RetryConfig(max_retries=self.config.rpc_max_retries)
        self._chains = {chain.id: chain for chain in chains}
        self._known_tokens = {chain.id: load_known_tokens(chain.id) for chain in chains}
        self.metadata_cache = TokenMetadataCache()

    def get_supported_chains(self) -> list[ChainInfo]:
        """Return the fixed list of chains this adapter serves."""
        return list(self._chains.values())

    def get_chain(self, chain_id: str) -> ChainInfo | None:
        """Look up a chain by id; unknown ids return None."""
        return self._chains.get(chain_id)

    def known_tokens(self, chain_id: str) -> list[TokenInfo]:
        """Return the static well-known token table for a chain."""
        return list(self._known_tokens.get(chain_id, {}).values())

    def _chain_or_raise(self, chain_id: str) -> ChainInfo:
        chain = self.get_chain(chain_id)
        if chain is None:
            raise ChainNotSupportedError(chain_id)
        return chain

    def _require_address(self, chain_id: str, address: str) -> None:
        if not self.is_valid_address(chain_id, address):
            raise InvalidAddressError(address, chain_id)

    def _known_by_symbol(self, chain_id: str, symbol: str) -> TokenInfo | None:
        return self._known_tokens.get(chain_id, {}).get(symbol.upper())

    def _known_by_address(self, chain_id: str, address: str) -> TokenInfo | None:
        for token in self._known_tokens.get(chain_id, {}).values():
            if self._same_address(token.address, address):
                return token
        return None

    def _same_address(self, a: str, b: str) -> bool:
        """Compare token identifiers using the ecosystem's equality rules."""
        return a == b

    @abstractmethod
    def is_valid_address(self, chain_id: str, address: str) -> bool:
        """
        Check an address syntactically, without network I/O.

        Parameters
        ----------
        chain_id : str
            Chain id (kept for ecosystems with per-chain formats)
        address : str
            Candidate address

        Returns
        -------
        bool
            True if well-formed; never raises on malformed input

        """
        ...

    @abstractmethod
    def is_native_token(self, chain_id: str, token: str) -> bool:
        """Return True if ``token`` is this ecosystem's native-asset sentinel on ``chain_id``."""
        ...

    @abstractmethod
    def get_native_balance(self, chain_id: str, address: str) -> TokenBalance:
        """
        Fetch the native-asset balance of an address.

        Raises
        ------
        ChainNotSupportedError
            If the chain id is unknown to this adapter
        InvalidAddressError
            If the address is malformed for this ecosystem
        RPCError
            If the network call fails

        """
        ...

    @abstractmethod
    def _get_fungible_balance(self, chain: ChainInfo, address: str, token: str) -> TokenBalance:
        """Fetch a non-native asset balance; the native sentinel is already excluded."""
        ...

    @abstractmethod
    def _read_token_metadata(self, chain: ChainInfo, token: str) -> TokenInfo | None:
        """Read metadata from the chain for a syntactically valid token identifier."""
        ...

    def get_token_balance(self, chain_id: str, address: str, token: str) -> TokenBalance:
        """
        Fetch a fungible asset balance.

        The ecosystem's native sentinel is redirected to :meth:`get_native_balance`.

        Parameters
        ----------
        chain_id : str
            Chain id
        address : str
            Owner address
        token : str
            Contract address, mint, or denom

        Returns
        -------
        TokenBalance
            Balance with exact formatting

        """
        chain = self._chain_or_raise(chain_id)
        if self.is_native_token(chain_id, token):
            return self.get_native_balance(chain_id, address)

        self._require_address(chain_id, address)
        return self._get_fungible_balance(chain, address, token)

    def get_token_balances(self, chain_id: str, address: str, tokens: list[str]) -> list[TokenBalance]:
        """
        Fetch several balances, in input order.

        The whole batch fails on the first failing token; failures are never
        reported as zero balances.

        Parameters
        ----------
        chain_id : str
            Chain id
        address : str
            Owner address
        tokens : list[str]
            Token identifiers

        Returns
        -------
        list[TokenBalance]
            One balance per token

        """
        return [self.get_token_balance(chain_id, address, token) for token in tokens]

    def resolve_token(self, chain_id: str, symbol_or_address: str) -> TokenInfo | None:
        """
        Resolve a symbol or raw address to token metadata.

        Resolution order: native token, known-token table (by symbol, then
        address), on-chain metadata when the input is a valid token
        identifier. Metadata read failures resolve to None.

        Parameters
        ----------
        chain_id : str
            Chain id
        symbol_or_address : str
            Human-typed symbol or ecosystem address

        Returns
        -------
        TokenInfo | None
            Metadata, or None when not found

        """
        chain = self._chain_or_raise(chain_id)
        query = symbol_or_address.strip()
        if not query:
            return None

        if query.upper() == chain.native_token.symbol.upper() or self.is_native_token(chain_id, query):
            return chain.native_token

        known = self._known_by_symbol(chain_id, query) or self._known_by_address(chain_id, query)
        if known:
            return known

        if not self.is_token_identifier(chain_id, query):
            return None

        try:
            return self._read_token_metadata(chain, query)
        except Exception as e:
            logger.debug("Metadata read for %s on %s failed: %s", query, chain_id, e)
            return None

    def is_token_identifier(self, chain_id: str, value: str) -> bool:
        """Return True if ``value`` is syntactically a token address for this ecosystem."""
        return self.is_valid_address(chain_id, value)

    def close(self) -> None:
        """Release network clients."""
