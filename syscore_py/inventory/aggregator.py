"""
Inventory aggregation for Syscore.

Drives the source adapters in trust order, routes every candidate through
normalization, the classification filter and the dedup gate, back-fills
icons and returns the name-sorted inventory.
"""

import logging
from typing import Dict, Iterable, List, Optional

from syscore_py.config import SyscoreConfig
from syscore_py.inventory import Inventory, SourceKind, TRUST_ORDER
from syscore_py.inventory.dedup import DedupGate
from syscore_py.inventory.icons import IconResolver
from syscore_py.inventory.normalize import normalize
from syscore_py.inventory.rules import RuleSet
from syscore_py.platform import start_menu_programs_dir, user_data_roots
from syscore_py.sources import BaseSource, RegistryReader, ShellLinkReader, SourceError
from syscore_py.sources.portable import PortableExecutableSource
from syscore_py.sources.registry import WinRegistry, uninstall_sources
from syscore_py.sources.scripted import PowerShellScriptInventory, ScriptedSource
from syscore_py.sources.start_menu import StartMenuSource
from syscore_py.sources.win32 import Win32FileDescriber, Win32LinkReader

logger = logging.getLogger("syscore.aggregator")


class InventoryAggregator:
    """Builds one deduplicated inventory from several sources."""

    def __init__(
        self,
        sources: Iterable[BaseSource],
        rules: Optional[RuleSet] = None,
        icon_resolver: Optional[IconResolver] = None,
    ):
        # Stable sort: sources of the same kind keep their given order.
        self.sources: List[BaseSource] = sorted(sources, key=lambda s: -s.kind.trust)
        self.rules = rules or RuleSet()
        self.icon_resolver = icon_resolver

    def collect(self) -> Inventory:
        """
        Run every source and merge the results.

        Returns:
            Inventory with the accepted records sorted by case-insensitive
            name and the per-source acceptance counts
        """
        gate = DedupGate()
        counts: Dict[SourceKind, int] = {kind: 0 for kind in TRUST_ORDER}

        for source in self.sources:
            before = len(gate)
            try:
                for candidate in source.candidates():
                    record = normalize(candidate)
                    if record is None or not self.rules.accepts(record):
                        continue
                    gate.admit(record)
            except (SourceError, OSError) as e:
                logger.warning(f"Failed to scan {source.kind.label} apps: {e}")
            added = len(gate) - before
            counts[source.kind] += added
            logger.info(f"Found {added} apps from {source.kind.label}")

        if self.icon_resolver is not None:
            self.icon_resolver.resolve_all(gate.accepted)

        apps = sorted(gate.accepted, key=lambda app: app.name.casefold())
        summary = ", ".join(f"{kind.label}: {counts[kind]}" for kind in TRUST_ORDER)
        logger.info(f"Total apps found: {len(apps)} ({summary})")
        return Inventory(apps=apps, counts=counts)


def build_sources(
    config: SyscoreConfig,
    registry: Optional[RegistryReader] = None,
    links: Optional[ShellLinkReader] = None,
) -> List[BaseSource]:
    """
    Wire the default Windows sources.

    Raises:
        SourceUnavailable: If the registry or the shell cannot be used on
            this host.
    """
    registry = registry or WinRegistry()
    links = links or Win32LinkReader()
    describer = Win32FileDescriber() if config.describe_executables else None
    roots = user_data_roots() + [str(p) for p in config.portable_roots]

    sources: List[BaseSource] = list(uninstall_sources(registry))
    sources.append(StartMenuSource(start_menu_programs_dir(), links, config.start_menu_depth))
    sources.append(PortableExecutableSource(roots, describer, config.portable_depth))
    sources.append(
        ScriptedSource(
            PowerShellScriptInventory(
                config.script_path, config.powershell, config.process_timeout
            )
        )
    )
    return sources


def build_aggregator(
    config: Optional[SyscoreConfig] = None, resolve_icons: bool = True
) -> InventoryAggregator:
    """
    Create the aggregator for this host.

    Raises:
        SourceUnavailable: If the registry or the shell cannot be used on
            this host.
    """
    config = config or SyscoreConfig()
    registry = WinRegistry()
    # Shared so shortcuts resolved while scanning are not resolved again for icons.
    links = Win32LinkReader()
    sources = build_sources(config, registry, links)
    resolver = None
    if resolve_icons:
        resolver = IconResolver(start_menu_programs_dir(), links, config.start_menu_depth)
    return InventoryAggregator(sources, RuleSet.with_extra(config.rules), resolver)
