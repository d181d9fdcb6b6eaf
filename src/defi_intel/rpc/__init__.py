"""RPC layer with HTTP clients, retry logic, and token metadata caching."""

from defi_intel.rpc.cache import TokenMetadataCache
from defi_intel.rpc.provider import JsonRpcClient, RestClient
from defi_intel.rpc.retry import RetryConfig, call_with_retry

__all__ = [
    "JsonRpcClient",
    "RestClient",
    "RetryConfig",
    "TokenMetadataCache",
    "call_with_retry",
]
