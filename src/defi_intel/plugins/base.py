"""Plugin interface and tool definitions exposed to agents."""

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from defi_intel.core.models import ChainInfo

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext


class ToolResult(BaseModel):
    """
    Outcome of a tool invocation.

    Attributes
    ----------
    content : str
        Text payload (pretty-printed JSON on success, a message on error)
    is_error : bool
        True when the tool failed

    """

    model_config = ConfigDict(frozen=True)

    content: str
    is_error: bool = False

    def parsed(self) -> Any:
        """Decode the JSON payload of a successful result."""
        return json.loads(self.content)


def json_result(data: Any) -> ToolResult:
    return ToolResult(content=json.dumps(data, indent=2, default=str))


def error_result(message: str) -> ToolResult:
    return ToolResult(content=message, is_error=True)


class ToolDefinition(BaseModel):
    """
    A named, schema-validated operation exposed by a plugin.

    Attributes
    ----------
    name : str
        Globally unique tool name, always prefixed with ``defi_``
    description : str
        What the tool does, for the agent
    input_model : type[BaseModel]
        Pydantic model validating the tool input
    handler : Callable[[BaseModel], ToolResult]
        Called with the validated input

    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[Any], ToolResult]

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the tool input."""
        return self.input_model.model_json_schema()


class DefiPlugin(ABC):
    """
    A bundle of tools registered with the registry at startup.

    Attributes
    ----------
    name : str
        Unique plugin name
    description : str
        Short description
    version : str
        Plugin version

    """

    name: str
    description: str
    version: str

    @abstractmethod
    def initialize(self, context: "PluginContext") -> None:
        """Receive the plugin context; called once during registration."""
        ...

    @abstractmethod
    def get_tools(self) -> list[ToolDefinition]:
        """Return the tools this plugin exposes."""
        ...

    def shutdown(self) -> None:
        """Release resources on registry shutdown."""


class BasePlugin(DefiPlugin):
    """Plugin base that stores the context and offers result helpers."""

    context: "PluginContext"

    def initialize(self, context: "PluginContext") -> None:
        self.context = context

    @staticmethod
    def json_result(data: Any) -> ToolResult:
        return json_result(data)

    @staticmethod
    def error_result(message: str) -> ToolResult:
        return error_result(message)

    def get_chains_for_address(self, address: str) -> list[ChainInfo]:
        return self.context.get_chains_for_address(address)
