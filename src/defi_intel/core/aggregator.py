"""Position aggregator fanning wallet scans out across chains and protocol scanners."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from functools import partial
from typing import TYPE_CHECKING

from defi_intel.core.fanout import IsolatedTask, gather_isolated
from defi_intel.core.models import (
    ChainInfo,
    ChainSummary,
    PositionKind,
    ProtocolPosition,
    ProtocolSummary,
    WalletScanReport,
)
from defi_intel.core.providers import ProtocolScanner

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext

logger = logging.getLogger(__name__)


class PositionAggregator:
    """
    Orchestrates position scanning across chains and protocols.

    Workflow:
    1. Pick candidate chains (explicit subset, or every chain accepting the address)
    2. Pick candidate scanners (protocol filter, or all)
    3. Run each eligible (scanner, chain) pair as an isolated task
    4. Fold positions into per-protocol and per-chain totals

    Parameters
    ----------
    context : PluginContext
        Registry view providing adapters and scanners
    max_workers : int | None
        Fan-out width (defaults to ``config.max_workers``)
    timeout : float | None
        Join deadline in seconds (defaults to ``config.task_timeout_seconds``)

    """

    def __init__(
        self,
        context: "PluginContext",
        max_workers: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.context = context
        self.max_workers = max_workers or context.config.max_workers
        self.timeout = timeout if timeout is not None else context.config.task_timeout_seconds

    def scan_wallet(
        self,
        address: str,
        chain_ids: Sequence[str] | None = None,
        protocols: Sequence[str] | None = None,
    ) -> WalletScanReport:
        """
        Scan a wallet for positions across every eligible scanner and chain.

        A failing or stalled (scanner, chain) pair contributes no positions;
        the rest of the scan is unaffected.

        Parameters
        ----------
        address : str
            Wallet address in any supported ecosystem's format
        chain_ids : Sequence[str] | None
            Restrict to these chains (None scans every compatible chain)
        protocols : Sequence[str] | None
            Restrict to these protocol names, case-insensitive (None scans every scanner)

        Returns
        -------
        WalletScanReport
            Positions with net totals by protocol and by chain; borrow
            positions always carry a negative ``total_value_usd``

        Raises
        ------
        ChainNotSupportedError
            If an explicitly requested chain id is not registered

        """
        chains = self._candidate_chains(address, chain_ids)
        scanners = self._candidate_scanners(protocols)

        tasks = [
            IsolatedTask(
                label=f"{scanner.protocol_name}@{chain.id}",
                fn=partial(scanner.scan_positions, chain.id, address, self.context),
            )
            for scanner in scanners
            for chain in chains
            if not scanner.supported_chains or chain.id in scanner.supported_chains
        ]
        logger.debug("Scanning %s: %d scanners x %d chains -> %d tasks", address, len(scanners), len(chains), len(tasks))

        results = gather_isolated(tasks, max_workers=self.max_workers, timeout=self.timeout)
        positions = [self._normalize(position) for batch in results for position in batch]

        return self._build_report(address, scanners, chains, positions)

    def _candidate_chains(self, address: str, chain_ids: Sequence[str] | None) -> list[ChainInfo]:
        if chain_ids is None:
            return self.context.get_chains_for_address(address)

        chains = []
        for chain_id in chain_ids:
            # Raises ChainNotSupportedError for unknown ids.
            chain = self.context.get_chain_adapter_for_chain(chain_id).get_chain(chain_id)
            if chain is not None:
                chains.append(chain)
        return chains

    def _candidate_scanners(self, protocols: Sequence[str] | None) -> list[ProtocolScanner]:
        scanners = list(self.context.get_scanners())
        if protocols is None:
            return scanners

        wanted = {name.lower() for name in protocols}
        return [scanner for scanner in scanners if scanner.protocol_name.lower() in wanted]

    @staticmethod
    def _normalize(position: ProtocolPosition) -> ProtocolPosition:
        """Debt is always negative, whatever sign the scanner used."""
        if position.kind == PositionKind.LENDING_BORROW and position.total_value_usd > 0:
            return position.model_copy(update={"total_value_usd": -position.total_value_usd})
        return position

    def _build_report(
        self,
        address: str,
        scanners: list[ProtocolScanner],
        chains: list[ChainInfo],
        positions: list[ProtocolPosition],
    ) -> WalletScanReport:
        by_protocol: dict[str, ProtocolSummary] = {}
        by_chain: dict[str, ChainSummary] = {}
        total = Decimal(0)

        for position in positions:
            value = position.total_value_usd
            total += value

            protocol = by_protocol.setdefault(position.protocol, ProtocolSummary())
            protocol.total_usd += value
            protocol.position_count += 1

            chain = by_chain.setdefault(position.chain_id, ChainSummary(name=position.chain_name))
            chain.total_usd += value
            chain.position_count += 1

        return WalletScanReport(
            address=address,
            total_value_usd=total,
            protocols_scanned=list(dict.fromkeys(scanner.protocol_name for scanner in scanners)),
            chains_scanned=[chain.id for chain in chains],
            by_protocol=by_protocol,
            by_chain=by_chain,
            positions=positions,
        )
