"""Error taxonomy shared by adapters, the registry, and the aggregation engines."""

from typing import Any


class DefiError(Exception):
    """
    Base error carrying a machine-readable code.

    Parameters
    ----------
    message : str
        Human-readable description
    code : str
        Stable error code (e.g. 'CHAIN_NOT_SUPPORTED')
    details : dict[str, Any] | None
        Structured context for callers

    """

    def __init__(self, message: str, code: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ChainNotSupportedError(DefiError):
    """Chain id (or ecosystem) unknown to the registry or to a specific adapter."""

    def __init__(self, chain_id: str) -> None:
        super().__init__(f'Chain "{chain_id}" is not supported', "CHAIN_NOT_SUPPORTED", {"chain_id": chain_id})


class TokenNotFoundError(DefiError):
    """Token resolution exhausted every strategy."""

    def __init__(self, token: str, chain_id: str) -> None:
        super().__init__(
            f'Token "{token}" not found on chain "{chain_id}"',
            "TOKEN_NOT_FOUND",
            {"token": token, "chain_id": chain_id},
        )


class InvalidAddressError(DefiError):
    """Address is not well-formed for the chain's ecosystem."""

    def __init__(self, address: str, chain_id: str) -> None:
        super().__init__(
            f'Invalid address "{address}" for chain "{chain_id}"',
            "INVALID_ADDRESS",
            {"address": address, "chain_id": chain_id},
        )


class AggregatorError(DefiError):
    """An external data source (scanner, yield source, API) misbehaved."""

    def __init__(self, aggregator: str, message: str) -> None:
        super().__init__(f"{aggregator}: {message}", "AGGREGATOR_ERROR", {"aggregator": aggregator})


class RPCError(DefiError):
    """Transport-level failure talking to a chain endpoint."""

    def __init__(self, chain_id: str, message: str) -> None:
        super().__init__(f"RPC call on {chain_id} failed: {message}", "RPC_ERROR", {"chain_id": chain_id})


class InvalidInputError(DefiError):
    """Engine input is malformed (e.g. non-positive amount)."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "INVALID_INPUT", details)


class RegistryError(DefiError):
    """Startup-time configuration error; the system must not start serving."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "REGISTRY_ERROR", details)


class ToolNameError(RegistryError):
    """A plugin exposes a tool name that is taken or lacks the required prefix."""
