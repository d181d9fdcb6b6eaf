"""Built-in protocol scanners and scanner base classes."""

from defi_intel.protocols.base import BaseProtocolScanner, BaseYieldSource
from defi_intel.protocols.native import NativeBalanceScanner
from defi_intel.protocols.tokens import TokenHoldingsScanner

__all__ = [
    "BaseProtocolScanner",
    "BaseYieldSource",
    "NativeBalanceScanner",
    "TokenHoldingsScanner",
]
