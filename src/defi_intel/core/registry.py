"""Registry wiring chain adapters, scanners, yield sources and tool-exposing plugins."""

import logging
import re
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ValidationError

from defi_intel.chains.base import ChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, DefiError, RegistryError, ToolNameError
from defi_intel.core.models import ChainInfo, Ecosystem
from defi_intel.core.providers import ProtocolScanner, YieldSource
from defi_intel.plugins.base import DefiPlugin, ToolDefinition, ToolResult, error_result, json_result

logger = logging.getLogger(__name__)

TOOL_NAME_PATTERN = re.compile(r"^defi_[a-z0-9]+(?:_[a-z0-9]+)*$")


class PluginContext:
    """
    Read-only view of the registry handed to plugins, scanners and engines.

    Parameters
    ----------
    registry : Registry
        Owning registry

    """

    def __init__(self, registry: "Registry") -> None:
        self._registry = registry

    @property
    def config(self) -> AppConfig:
        return self._registry.config

    def get_chain_adapter(self, ecosystem: Ecosystem | str) -> ChainAdapter:
        return self._registry.get_chain_adapter(ecosystem)

    def get_chain_adapter_for_chain(self, chain_id: str) -> ChainAdapter:
        return self._registry.get_chain_adapter_for_chain(chain_id)

    def get_all_chains(self) -> list[ChainInfo]:
        return self._registry.get_supported_chains()

    def get_scanners(self) -> Sequence[ProtocolScanner]:
        return self._registry.scanners

    def get_yield_sources(self) -> Sequence[YieldSource]:
        return self._registry.yield_sources

    def get_chains_for_address(self, address: str) -> list[ChainInfo]:
        """
        Get every registered chain whose adapter accepts the address format.

        Parameters
        ----------
        address : str
            Wallet address in any ecosystem's format

        Returns
        -------
        list[ChainInfo]
            Matching chains in registration order

        """
        return [
            chain
            for chain in self.get_all_chains()
            if self.get_chain_adapter_for_chain(chain.id).is_valid_address(chain.id, address)
        ]


class GetChainsInput(BaseModel):
    """Input for the built-in chain listing tool."""

    ecosystem: Ecosystem | None = None


class Registry:
    """
    Central registry with a two-phase lifecycle.

    Adapters, scanners, yield sources and plugins are registered during
    startup; :meth:`seal` then freezes the collections so query-time code
    reads immutable snapshots. Any registration after sealing raises
    :class:`RegistryError`.

    Parameters
    ----------
    config : AppConfig | None
        Static configuration exposed through the context

    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.context = PluginContext(self)

        self._adapters: dict[Ecosystem, ChainAdapter] = {}
        self._chain_index: dict[str, Ecosystem] = {}
        self._plugins: dict[str, DefiPlugin] = {}
        self._tools: dict[str, ToolDefinition] = {}
        self._scanners: list[ProtocolScanner] | tuple[ProtocolScanner, ...] = []
        self._yield_sources: list[YieldSource] | tuple[YieldSource, ...] = []
        self._sealed = False

        self._register_builtin_tools()

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def scanners(self) -> Sequence[ProtocolScanner]:
        return self._scanners

    @property
    def yield_sources(self) -> Sequence[YieldSource]:
        return self._yield_sources

    def _check_open(self, what: str) -> None:
        if self._sealed:
            msg = f"Cannot register {what}: registry is sealed"
            raise RegistryError(msg)

    # Chain adapters

    def register_chain_adapter(self, adapter: ChainAdapter) -> None:
        """
        Register the adapter for its ecosystem; a later registration replaces it.

        Chain ids served only by the replaced adapter are dropped from the
        chain index.

        Parameters
        ----------
        adapter : ChainAdapter
            Adapter to register

        """
        self._check_open(f"chain adapter {adapter.ecosystem}")

        previous = self._adapters.get(adapter.ecosystem)
        if previous is not None:
            logger.info("Replacing %s chain adapter", adapter.ecosystem)
            self._chain_index = {
                chain_id: ecosystem for chain_id, ecosystem in self._chain_index.items() if ecosystem != adapter.ecosystem
            }

        self._adapters[adapter.ecosystem] = adapter
        for chain in adapter.get_supported_chains():
            owner = self._chain_index.get(chain.id)
            if owner is not None and owner != adapter.ecosystem:
                logger.warning("Chain %s moves from %s to %s adapter", chain.id, owner, adapter.ecosystem)
            self._chain_index[chain.id] = adapter.ecosystem

        logger.info(
            "Registered %s chain adapter (%d chains)",
            adapter.ecosystem,
            len(adapter.get_supported_chains()),
        )

    def get_chain_adapter(self, ecosystem: Ecosystem | str) -> ChainAdapter:
        """
        Get the adapter for an ecosystem.

        Raises
        ------
        ChainNotSupportedError
            If no adapter is registered for the ecosystem

        """
        try:
            adapter = self._adapters.get(Ecosystem(ecosystem))
        except ValueError:
            adapter = None
        if adapter is None:
            raise ChainNotSupportedError(str(ecosystem))
        return adapter

    def get_chain_adapter_for_chain(self, chain_id: str) -> ChainAdapter:
        """
        Get the adapter serving a chain id.

        Raises
        ------
        ChainNotSupportedError
            If the chain id is not registered

        """
        ecosystem = self._chain_index.get(chain_id)
        if ecosystem is None:
            raise ChainNotSupportedError(chain_id)
        return self.get_chain_adapter(ecosystem)

    def get_supported_chains(self) -> list[ChainInfo]:
        """Get every chain served by a registered adapter."""
        chains = []
        for ecosystem, adapter in self._adapters.items():
            chains.extend(chain for chain in adapter.get_supported_chains() if self._chain_index.get(chain.id) == ecosystem)
        return chains

    # Scanners and yield sources

    def register_scanner(self, scanner: ProtocolScanner) -> None:
        self._check_open(f"scanner {scanner.protocol_name}")
        self._scanners.append(scanner)  # type: ignore[union-attr]
        logger.info("Registered scanner %s", scanner.protocol_name)

    def register_yield_source(self, source: YieldSource) -> None:
        self._check_open(f"yield source {source.protocol_name}")
        self._yield_sources.append(source)  # type: ignore[union-attr]
        logger.info("Registered yield source %s", source.protocol_name)

    # Plugins and tools

    def register_plugin(self, plugin: DefiPlugin) -> None:
        """
        Initialize a plugin and claim its tool names.

        Tool names are validated as a whole before anything is committed.

        Parameters
        ----------
        plugin : DefiPlugin
            Plugin to register

        Raises
        ------
        RegistryError
            If the registry is sealed or the plugin name is taken
        ToolNameError
            If a tool name lacks the ``defi_`` prefix, is not lower-case
            snake case, or is already claimed

        """
        self._check_open(f"plugin {plugin.name}")
        if plugin.name in self._plugins:
            msg = f'Plugin "{plugin.name}" is already registered'
            raise RegistryError(msg, plugin=plugin.name)

        plugin.initialize(self.context)
        tools = plugin.get_tools()

        claimed: dict[str, ToolDefinition] = {}
        for tool in tools:
            if not TOOL_NAME_PATTERN.match(tool.name):
                msg = f'Tool "{tool.name}" from plugin "{plugin.name}" must be lower-case snake case prefixed with "defi_"'
                raise ToolNameError(msg, tool=tool.name, plugin=plugin.name)
            if tool.name in self._tools or tool.name in claimed:
                msg = f'Tool "{tool.name}" from plugin "{plugin.name}" is already registered'
                raise ToolNameError(msg, tool=tool.name, plugin=plugin.name)
            claimed[tool.name] = tool

        self._plugins[plugin.name] = plugin
        self._tools.update(claimed)
        logger.info("Registered plugin %s v%s (%d tools)", plugin.name, plugin.version, len(claimed))

    def get_all_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def invoke_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """
        Validate input and run a tool.

        Validation failures and handler exceptions are returned as error
        results rather than raised.

        Parameters
        ----------
        name : str
            Tool name
        arguments : dict[str, Any] | None
            Raw tool input

        Returns
        -------
        ToolResult
            Handler result, or an error result

        """
        tool = self._tools.get(name)
        if tool is None:
            return error_result(f'Unknown tool "{name}"')

        try:
            params = tool.input_model.model_validate(arguments or {})
        except ValidationError as e:
            return error_result(f"Invalid input for {name}: {e}")

        try:
            return tool.handler(params)
        except DefiError as e:
            logger.warning("Tool %s failed: [%s] %s", name, e.code, e.message)
            return error_result(f"[{e.code}] {e.message}")
        except Exception as e:
            logger.exception("Tool %s raised", name)
            return error_result(f"Error: {e}")

    def _register_builtin_tools(self) -> None:
        self._tools["defi_get_chains"] = ToolDefinition(
            name="defi_get_chains",
            description="List every supported chain with its ecosystem and native token.",
            input_model=GetChainsInput,
            handler=self._get_chains_tool,
        )

    def _get_chains_tool(self, params: GetChainsInput) -> ToolResult:
        chains = [
            {
                "id": chain.id,
                "name": chain.name,
                "ecosystem": chain.ecosystem.value,
                "nativeChainId": chain.native_chain_id,
                "nativeToken": chain.native_token.symbol,
                "explorerUrl": chain.explorer_url,
            }
            for chain in self.get_supported_chains()
            if params.ecosystem is None or chain.ecosystem == params.ecosystem
        ]
        return json_result({"chains": chains, "count": len(chains)})

    # Lifecycle

    def seal(self) -> None:
        """End the registration window and snapshot every collection."""
        if self._sealed:
            return
        self._scanners = tuple(self._scanners)
        self._yield_sources = tuple(self._yield_sources)
        self._sealed = True
        logger.info(
            "Registry sealed: %d chains, %d scanners, %d yield sources, %d tools",
            len(self._chain_index),
            len(self._scanners),
            len(self._yield_sources),
            len(self._tools),
        )

    def shutdown(self) -> None:
        """Shut plugins down, then close adapter network clients."""
        for plugin in self._plugins.values():
            try:
                plugin.shutdown()
            except Exception:
                logger.exception("Plugin %s failed to shut down", plugin.name)
        for adapter in self._adapters.values():
            adapter.close()
