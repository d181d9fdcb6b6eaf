"""HTTP clients for non-EVM chain endpoints (JSON-RPC and REST)."""

import itertools
import logging
from typing import Any

import httpx

from defi_intel.core.errors import RPCError
from defi_intel.rpc.retry import RetryConfig, call_with_retry

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class _BaseHTTPClient:
    """
    Shared httpx plumbing: one pooled client per chain, retries on transient errors.

    Parameters
    ----------
    chain_id : str
        Chain the endpoint belongs to (used in errors and logs)
    url : str
        Endpoint base URL
    timeout : float
        Per-request timeout in seconds
    retry_config : RetryConfig | None
        Backoff settings for transient failures
    client : httpx.Client | None
        Pre-built client (tests inject one with a mock transport)

    """

    def __init__(
        self,
        chain_id: str,
        url: str,
        timeout: float = 15.0,
        retry_config: RetryConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.chain_id = chain_id
        self.url = url.rstrip("/")
        self.retry_config = retry_config or RetryConfig()
        self.client = client or httpx.Client(timeout=timeout, headers={"Content-Type": "application/json"})

    def _send(self, description: str, request: httpx.Request) -> Any:
        def attempt() -> Any:
            response = self.client.send(request)
            if response.status_code in RETRYABLE_STATUS:
                response.raise_for_status()
            if response.is_error:
                msg = f"HTTP {response.status_code} for {description}"
                raise RPCError(self.chain_id, msg)
            return response.json()

        try:
            return call_with_retry(
                attempt,
                self.retry_config,
                description=f"{self.chain_id} {description}",
                retry_on=(httpx.TransportError, httpx.HTTPStatusError),
            )
        except httpx.HTTPError as e:
            raise RPCError(self.chain_id, f"{description}: {e}") from e
        except ValueError as e:
            raise RPCError(self.chain_id, f"{description}: malformed JSON response") from e

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()


class JsonRpcClient(_BaseHTTPClient):
    """JSON-RPC 2.0 client (used for Solana)."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._ids = itertools.count(1)

    def request(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Make a JSON-RPC call.

        Parameters
        ----------
        method : str
            RPC method name (e.g. 'getBalance')
        params : list[Any] | None
            Positional parameters

        Returns
        -------
        Any
            The ``result`` member of the response

        Raises
        ------
        RPCError
            On transport failure, HTTP error, or a JSON-RPC error object

        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or []}
        body = self._send(method, self.client.build_request("POST", self.url, json=payload))

        if not isinstance(body, dict):
            raise RPCError(self.chain_id, f"{method}: unexpected response shape")
        if body.get("error"):
            error = body["error"]
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise RPCError(self.chain_id, f"{method}: {message}")
        return body.get("result")


class RestClient(_BaseHTTPClient):
    """Read-only REST client (used for Cosmos LCD endpoints)."""

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        GET a JSON document relative to the base URL.

        Parameters
        ----------
        path : str
            Path starting with '/'
        params : dict[str, Any] | None
            Query string parameters

        Returns
        -------
        dict[str, Any]
            Decoded JSON body

        Raises
        ------
        RPCError
            On transport failure or non-2xx response

        """
        request = self.client.build_request("GET", f"{self.url}{path}", params=params)
        body = self._send(f"GET {path}", request)
        if not isinstance(body, dict):
            raise RPCError(self.chain_id, f"GET {path}: unexpected response shape")
        return body
