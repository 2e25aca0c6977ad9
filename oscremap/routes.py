"""
Route tables - per-remote OSC address mapping rules.

A RouteTable holds the mappings for one configured remote (one OSC output):
source pattern -> ordered destination patterns. It answers three questions
for the remap engine and the transport in front of it:

    - should_handle(address): does this remote care about the address?
    - remap(address): which destination addresses does it become?
    - filter_prefix: what coarse prefix covers everything this remote receives?

Tables are built once per config load and never mutated afterwards. Invalid
entries are rejected while building (see oscremap.validation) and never stored.
"""

import os
from itertools import chain
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from oscremap.log import get_logger
from oscremap.pattern import SEPARATOR, is_wildcard, matches, rewrite
from oscremap.validation import validate_mapping

logger = get_logger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_NAME = "Unknown"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7000

# Filter used when a table has no mappings at all
DEFAULT_FILTER_PREFIX = "/lx"


# ============================================================================
# ROUTE TABLE
# ============================================================================

class RouteTable:
    """Mapping rules and derived output filter for a single remote.

    Attributes:
        name (str): Display name, used by the host as a lookup key
        host (str): Remote IP address or hostname
        port (int): Remote UDP port
        mappings (Mapping[str, Tuple[str, ...]]): Read-only view of
            source pattern -> destination patterns

    Derived once at construction:
        is_passthrough (bool): Every entry is an identity mapping
        filter_prefix (str): Coarse prefix covering all destination patterns

    Examples:
        >>> table = RouteTable("Console", mappings={
        ...     "/lx/tempo/beat": ["/remote/beat"],
        ...     "/lx/tempo/*": ["/remote/tempo/*"],
        ... })
        >>> table.remap("/lx/tempo/bpm")
        ['/remote/tempo/bpm']
        >>> table.filter_prefix
        '/remote/'
    """

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        mappings: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self.name = name
        self.host = host
        self.port = port

        accepted: Dict[str, Tuple[str, ...]] = {}
        for source, destinations in (mappings or {}).items():
            is_valid, error_msg = validate_mapping(source, destinations)
            if not is_valid:
                logger.error(f"{error_msg} - skipping (remote '{name}')")
                continue
            accepted[source] = tuple(destinations)

        self.mappings = MappingProxyType(accepted)
        self._is_passthrough = self._detect_passthrough()
        self._filter_prefix = self._calculate_filter_prefix()

    @property
    def is_passthrough(self) -> bool:
        """True if the table only mirrors addresses (every entry is source -> [source])."""
        return self._is_passthrough

    @property
    def filter_prefix(self) -> str:
        """Coarse output filter derived from the destination patterns."""
        return self._filter_prefix

    # ========================================================================
    # MATCHING
    # ========================================================================

    def should_handle(self, address: str) -> bool:
        """Return True if any source pattern matches the address."""
        return any(matches(address, source) for source in self.mappings)

    def remap(self, address: str) -> List[str]:
        """Remap an address into this table's destination addresses.

        An exact key hit returns that key's destinations unchanged. Otherwise
        every wildcard key covering the address contributes the rewrite of its
        destination; overlapping wildcards all fire. An address nothing covers
        is returned as-is.

        Args:
            address: Concrete OSC address

        Returns:
            Non-empty list of destination addresses
        """
        exact = self.mappings.get(address)
        if exact is not None:
            return list(exact)

        results = []
        for source, destinations in self.mappings.items():
            if is_wildcard(source) and matches(address, source):
                results.extend(rewrite(address, source, dest) for dest in destinations)

        if not results:
            results.append(address)

        return results

    def accepts(self, address: str) -> bool:
        """Return True if an outbound address passes this table's coarse filter."""
        return address.startswith(self.filter_prefix)

    # ========================================================================
    # DERIVED STATE
    # ========================================================================

    def _detect_passthrough(self) -> bool:
        if not self.mappings:
            return False
        return all(
            len(destinations) == 1 and destinations[0] == source
            for source, destinations in self.mappings.items()
        )

    def _calculate_filter_prefix(self) -> str:
        """Longest common prefix of all destination patterns, on a path boundary.

        Falls back to the shortest destination pattern (ties: lexicographically
        smallest) when the common prefix is empty or just "/".
        """
        if not self.mappings:
            return DEFAULT_FILTER_PREFIX

        patterns = set(chain.from_iterable(self.mappings.values()))
        prefix = os.path.commonprefix(sorted(patterns))

        # Never split a path segment
        if not prefix.endswith(SEPARATOR):
            prefix = prefix[:prefix.rfind(SEPARATOR) + 1]

        if prefix in ("", SEPARATOR):
            return min(patterns, key=lambda p: (len(p), p))

        return prefix

    def describe(self) -> List[str]:
        """Summary lines for logs and the CLI."""
        lines = [f"remote: {self.name} ({self.host}:{self.port})"]
        for source, destinations in self.mappings.items():
            if len(destinations) == 1:
                lines.append(f"  mappings -> {source} : {destinations[0]}")
            else:
                lines.append(f"  mappings -> {source} : {list(destinations)}")
        lines.append(f"  longest_prefix_filter -> {self.filter_prefix}")
        lines.append(f"  passthrough -> {self.is_passthrough}")
        return lines

    def __repr__(self):
        return (
            f"RouteTable(name={self.name!r}, host={self.host!r}, port={self.port}, "
            f"mappings={len(self.mappings)})"
        )
