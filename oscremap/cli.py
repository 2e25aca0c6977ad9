#!/usr/bin/env python3
"""
Command-line tool for checking an OSC Remapper config.

Loads the config, prints every remote's mappings, filter prefix and
passthrough flag, and optionally shows where one address would be sent.

Usage:
    python -m oscremap
    python -m oscremap --config remapper_config.yaml /lx/tempo/beat 1.0
"""

import argparse
import sys
from typing import List, Optional

from oscremap.config import load_config
from oscremap.engine import RemapEngine
from oscremap.log import set_level


def parse_value(arg: str) -> float:
    """Parse the VALUE argument, raising ValueError for non-numbers."""
    try:
        return float(arg)
    except ValueError:
        raise ValueError(f"VALUE must be a number, got '{arg}'")


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point.

    Command-line arguments:
        --config PATH       Path to remapper_config.yaml (default: OSCREMAP_CONFIG
                            or the packaged example)
        --log-level LEVEL   Log level for config loading (default: WARNING)
        ADDRESS             Optional OSC address to remap
        VALUE               Optional numeric payload (default: 1.0)

    Example usage:
        python -m oscremap --config show.yaml
        python -m oscremap /lx/tempo/beat 0.5
    """
    parser = argparse.ArgumentParser(description="OSC Remapper - inspect config and remap addresses")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to remapper_config.yaml (default: $OSCREMAP_CONFIG or packaged example)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Log level while loading (DEBUG/INFO/WARNING/ERROR, default: WARNING)",
    )
    parser.add_argument("address", nargs="?", help="OSC address to remap (e.g., /lx/tempo/beat)")
    parser.add_argument("value", nargs="?", default="1.0", help="Numeric payload (default: 1.0)")

    args = parser.parse_args(argv)

    try:
        value = parse_value(args.value)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    set_level(args.log_level)

    config = load_config(args.config)
    for line in config.describe():
        print(line)

    if args.address is None:
        return

    engine = RemapEngine(config)
    outbound = engine.process(args.address, value)

    print()
    if not outbound:
        print(f"{args.address}: no remote handles this address")

    for message in outbound:
        remote = message.remote
        print(f"{remote.name} {remote.host}:{remote.port} → {message.address} {float(message.value)}")

    engine.stats.print_stats("REMAP STATISTICS")


if __name__ == "__main__":
    main()
