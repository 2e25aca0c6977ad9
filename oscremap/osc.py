"""
oscremap OSC boundary - python-osc adapters and message statistics.

The remap engine itself never touches sockets. This module converts between
python-osc messages and engine events, and hands outbound messages to a
transport callable owned by the host application.

Classes:
    - MessageStatistics: Thread-safe message counter with formatted output
    - OscRemapHandler: python-osc dispatcher callback feeding a RemapEngine

Functions:
    - build_message(address, value): OscMessage with one float32 argument
    - encode(outbound): Datagram bytes for an outbound message
    - build_dispatcher(engine, send): Dispatcher with the remap handler as default
"""

import threading
from typing import Callable

from pythonosc import dispatcher
from pythonosc.osc_message import OscMessage
from pythonosc.osc_message_builder import OscMessageBuilder

from oscremap.log import get_logger

logger = get_logger(__name__)


# ============================================================================
# MESSAGE BUILDING
# ============================================================================

def build_message(address: str, value: float) -> OscMessage:
    """Build an OSC message carrying a single float32 argument.

    Examples:
        >>> msg = build_message("/remote/beat", 1.0)
        >>> msg.address, msg.params
        ('/remote/beat', [1.0])
    """
    builder = OscMessageBuilder(address=address)
    builder.add_arg(float(value), arg_type=OscMessageBuilder.ARG_TYPE_FLOAT)
    return builder.build()


def encode(outbound) -> bytes:
    """Encode an OutboundMessage into an OSC datagram for the transport."""
    return build_message(outbound.address, outbound.value).dgram


# ============================================================================
# DISPATCHER HANDLER
# ============================================================================

class OscRemapHandler:
    """python-osc dispatcher callback that runs messages through a RemapEngine.

    Each inbound message must carry exactly one numeric argument. Every
    resulting outbound message that passes its remote's coarse filter is
    handed to `send(remote, message)`, where remote is the RouteTable and
    message the encoded OscMessage.

    Attributes:
        engine (RemapEngine): Engine consulted for every message
        send (Callable): Transport callback owned by the host
        stats (MessageStatistics): Counters for invalid/filtered/sent messages

    Examples:
        >>> handler = OscRemapHandler(engine, send=lambda remote, msg: ...)
        >>> handler("/lx/tempo/beat", 1.0)
    """

    def __init__(self, engine, send: Callable):
        self.engine = engine
        self.send = send
        self.stats = MessageStatistics()

    def __call__(self, address: str, *args) -> None:
        self.stats.increment('total_messages')

        if len(args) != 1:
            self.stats.increment('invalid_messages')
            logger.warning(f"{address} expects 1 argument, got {len(args)}")
            return

        try:
            outbound = self.engine.process(address, args[0])
        except ValueError as e:
            self.stats.increment('invalid_messages')
            logger.warning(f"Invalid value for {address}: {e}")
            return

        for message in outbound:
            if not message.remote.accepts(message.address):
                self.stats.increment('filtered_messages')
                logger.debug(
                    f"FILTERED: {message.address} (remote '{message.destination}' "
                    f"filter {message.remote.filter_prefix})"
                )
                continue

            self.send(message.remote, build_message(message.address, message.value))
            self.stats.increment('sent_messages')
            logger.debug(f"{address} -> {message.destination}: {message.address} {message.value}")


def build_dispatcher(engine, send: Callable) -> dispatcher.Dispatcher:
    """Create a Dispatcher that remaps every inbound address.

    Args:
        engine: RemapEngine to consult
        send: Transport callback, called as send(remote, OscMessage)

    Returns:
        Dispatcher with an OscRemapHandler installed as default handler
    """
    disp = dispatcher.Dispatcher()
    disp.set_default_handler(OscRemapHandler(engine, send))
    return disp


# ============================================================================
# MESSAGE STATISTICS
# ============================================================================

class MessageStatistics:
    """Thread-safe message statistics tracker with formatted output.

    Typical counters:
        - total_messages: All events offered to the engine
        - remapped_messages: Events at least one remote handled
        - outbound_messages: Outbound messages produced
        - skipped_messages: Events ignored while remapping is disabled
        - rewrite_errors: Destinations dropped on a rewrite failure

    Attributes:
        counters (dict): Dictionary of counter_name -> count
        lock (threading.Lock): Thread-safe increment protection
    """

    def __init__(self):
        self.counters = {}
        self.lock = threading.Lock()

    def increment(self, counter_name: str, amount: int = 1) -> None:
        """Increment a counter by specified amount (thread-safe)."""
        with self.lock:
            self.counters[counter_name] = self.counters.get(counter_name, 0) + amount

    def get(self, counter_name: str) -> int:
        """Get current value of a counter (0 if it doesn't exist)."""
        with self.lock:
            return self.counters.get(counter_name, 0)

    def snapshot(self) -> dict:
        with self.lock:
            return dict(self.counters)

    def print_stats(self, title: str = "STATISTICS") -> None:
        """Print formatted statistics to console.

        Output format:
            ============================================================
            TITLE
            ============================================================
            Counter Name: value
            ...
            ============================================================
        """
        print("\n" + "=" * 60)
        print(title)
        print("=" * 60)

        # Print without holding lock (slow I/O)
        snapshot = self.snapshot()
        for name in sorted(snapshot.keys()):
            display_name = name.replace('_', ' ').title()
            print(f"{display_name}: {snapshot[name]}")

        print("=" * 60)
