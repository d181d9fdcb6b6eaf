"""Lifetime cache for on-chain token metadata."""

import threading
from collections.abc import Callable

from defi_intel.core.models import TokenInfo


class TokenMetadataCache:
    """
    Thread-safe cache of token metadata keyed by (chain id, address).

    Token metadata is immutable on-chain, so entries never expire. Failed
    lookups are not cached.

    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], TokenInfo] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _make_key(chain_id: str, address: str) -> tuple[str, str]:
        return chain_id, address

    def get(self, chain_id: str, address: str) -> TokenInfo | None:
        with self._lock:
            return self._entries.get(self._make_key(chain_id, address))

    def set(self, token: TokenInfo) -> None:
        with self._lock:
            self._entries[self._make_key(token.chain_id, token.address)] = token

    def get_or_load(self, chain_id: str, address: str, loader: Callable[[], TokenInfo]) -> TokenInfo:
        """
        Return the cached entry or call ``loader`` and cache its result.

        The loader runs outside the lock; concurrent misses for the same key
        may both load, which is harmless for immutable data.

        Parameters
        ----------
        chain_id : str
            Chain id
        address : str
            Normalized token address (checksummed / mint / denom)
        loader : Callable[[], TokenInfo]
            Fetches metadata on a miss; exceptions propagate and nothing is cached

        Returns
        -------
        TokenInfo
            Cached or freshly loaded metadata

        """
        cached = self.get(chain_id, address)
        if cached is not None:
            return cached

        token = loader()
        with self._lock:
            return self._entries.setdefault(self._make_key(chain_id, address), token)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
