"""
Remap Engine - fans outgoing OSC events out to every configured remote.

For each (address, value) event, every route table is consulted in config
order. Each table that handles the address contributes one outbound message
per remapped destination, so one event can reach several remotes and several
addresses within one remote.

THREAD SAFETY:
- Route tables are immutable; process() only reads them
- reload() swaps the config reference; process() reads it once per event, so
  an event sees either the old or the new config, never a mix
- Statistics counters are lock-protected
"""

import numbers
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from oscremap.config import RemapperConfig, default_config, load_config
from oscremap.log import get_logger
from oscremap.osc import MessageStatistics
from oscremap.routes import RouteTable

logger = get_logger(__name__)


@dataclass(frozen=True)
class OutboundMessage:
    """One remapped message bound for a remote.

    Attributes:
        remote (RouteTable): Table (remote) the message is for
        address (str): Rewritten OSC address
        value (np.float32): Payload, passed through unchanged
    """
    remote: RouteTable
    address: str
    value: np.float32

    @property
    def destination(self) -> str:
        """Remote name."""
        return self.remote.name


def to_float32(value) -> np.float32:
    """Coerce a numeric OSC payload to float32.

    Infinities and NaN pass through; finite values outside float32 range do not.

    Raises:
        ValueError: If value is not a real number (bools and strings included)
                    or is finite but too large for float32
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"Expected a numeric value, got {type(value).__name__}: {value!r}")

    try:
        with np.errstate(over='ignore'):
            result = np.float32(value)
    except OverflowError:
        raise ValueError(f"Value out of float32 range: {value!r}")

    if np.isinf(result) and not np.isinf(value):
        raise ValueError(f"Value out of float32 range: {value!r}")
    return result


class RemapEngine:
    """Runs every outgoing event through all route tables.

    Attributes:
        enabled (bool): When False, process() drops every event
        stats (MessageStatistics): Event and outbound counters

    Examples:
        >>> engine = RemapEngine(load_config("remapper_config.yaml"))
        >>> for msg in engine.process("/lx/tempo/beat", 1.0):
        ...     print(msg.destination, msg.address, msg.value)
    """

    def __init__(self, config: Optional[RemapperConfig] = None, enabled: bool = True):
        self._config = config if config is not None else default_config()
        self._reload_lock = threading.Lock()
        self.enabled = enabled
        self.stats = MessageStatistics()

    @property
    def config(self) -> RemapperConfig:
        """Currently active configuration."""
        return self._config

    # ========================================================================
    # CONTROL
    # ========================================================================

    def set_enabled(self, enabled: bool) -> None:
        """Start or stop remapping."""
        self.enabled = enabled
        if enabled:
            logger.info("OSC remapping started")
        else:
            logger.info("OSC remapping stopped")

    def reload(self, config: RemapperConfig) -> None:
        """Swap in a new configuration atomically.

        Args:
            config: Fully built replacement config (never mutated in place)
        """
        with self._reload_lock:
            old_count = len(self._config)
            self._config = config

        self.stats.increment('reloads')
        logger.info(f"Config reloaded: {old_count} → {len(config)} remotes")

    def reload_from(self, config_path: Optional[Union[str, Path]] = None) -> RemapperConfig:
        """Load a config file and swap it in (falls back to default_config())."""
        config = load_config(config_path)
        self.reload(config)
        return config

    # ========================================================================
    # PROCESSING
    # ========================================================================

    def process(self, address: str, value) -> List[OutboundMessage]:
        """Remap one outgoing event for every remote that handles it.

        Passthrough remotes are remapped like any other; the flag is only a
        hint for the transport.

        Args:
            address: Outgoing OSC address (e.g., "/lx/tempo/beat")
            value: Numeric payload

        Returns:
            Outbound messages in config order, then remap order

        Raises:
            ValueError: If value is not numeric
        """
        payload = to_float32(value)
        self.stats.increment('total_messages')

        if not self.enabled:
            self.stats.increment('skipped_messages')
            return []

        config = self._config

        outbound = []
        for remote in config:
            if not remote.should_handle(address):
                continue

            try:
                addresses = remote.remap(address)
            except ValueError as e:
                self.stats.increment('rewrite_errors')
                logger.error(f"Rewrite failed for {address} on remote '{remote.name}': {e}")
                continue

            outbound.extend(OutboundMessage(remote, dest, payload) for dest in addresses)

        if outbound:
            self.stats.increment('remapped_messages')
            self.stats.increment('outbound_messages', len(outbound))
            logger.debug(f"{address} -> {[m.address for m in outbound]}")

        return outbound
