"""Static configuration exposed read-only to plugins, scanners, and yield sources."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from defi_intel.core.models import ChainInfo


class ApiKeys(BaseModel):
    """Optional third-party API keys handed to providers."""

    model_config = ConfigDict(frozen=True)

    coingecko: str | None = None


class AppConfig(BaseSettings):
    """
    Application configuration.

    Values come from init kwargs, then ``DEFI_INTEL_*`` environment variables
    (nested fields use ``__``, e.g. ``DEFI_INTEL_RPC_URLS__BASE``), then ``.env``.

    Attributes
    ----------
    rpc_urls : dict[str, str]
        Per-chain RPC endpoint overrides keyed by chain id
    api_keys : ApiKeys
        Third-party API keys
    default_slippage_bps : int
        Default slippage tolerance in basis points
    task_timeout_seconds : float
        Join deadline for each fan-out batch
    max_workers : int
        Upper bound on concurrent fan-out tasks
    rpc_timeout_seconds : float
        Per-request HTTP timeout for chain clients
    rpc_max_retries : int
        Retries for idempotent RPC reads

    """

    model_config = SettingsConfigDict(
        env_prefix="DEFI_INTEL_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    rpc_urls: dict[str, str] = Field(default_factory=dict)
    api_keys: ApiKeys = Field(default_factory=ApiKeys)
    default_slippage_bps: int = Field(default=50, ge=1, le=5000)
    task_timeout_seconds: float = Field(default=30.0, gt=0)
    max_workers: int = Field(default=16, ge=1)
    rpc_timeout_seconds: float = Field(default=15.0, gt=0)
    rpc_max_retries: int = Field(default=2, ge=0)

    def rpc_url_for(self, chain: ChainInfo) -> str:
        """Return the configured override for a chain, or its default endpoint."""
        return self.rpc_urls.get(chain.id) or chain.rpc_url
