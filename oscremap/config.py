"""
Remapper configuration - YAML loading and route table assembly.

Config file format (oscremap/config/remapper_config.yaml):

    remotes:
      - name: "Console"
        ip: "10.0.0.5"
        port: 9000
        mappings:
          /lx/tempo/beat: ["/remote/beat"]
          /lx/tempo/*: ["/remote/tempo/*"]

Every mapping value must be a list, even for a single destination.

FAILURE POLICY:
- Bad root shape, missing 'remotes', unreadable file, or any unexpected error
  while building: the whole config is replaced by default_config()
- Bad remote record or bad mapping entry: only that record/entry is skipped
- The resulting config always holds at least one route table
"""

import os
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import yaml

from oscremap.log import get_logger
from oscremap.routes import DEFAULT_HOST, DEFAULT_NAME, DEFAULT_PORT, RouteTable

logger = get_logger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "remapper_config.yaml"
CONFIG_ENV_VAR = "OSCREMAP_CONFIG"

FAILED_REMOTE_NAME = "Failed to load config"
FAILED_MAPPINGS = {"/": ["/failed/to/load/config"]}

PORT_MIN = 0
PORT_MAX = 65535


# ============================================================================
# CONFIG MODEL
# ============================================================================

class RemapperConfig:
    """Ordered, immutable collection of route tables (one per remote).

    Order is declaration order in the config file. The remap engine consults
    every table in this order and all matching tables fire.

    Attributes:
        remotes (Tuple[RouteTable, ...]): Route tables in declaration order
    """

    def __init__(self, remotes: Sequence[RouteTable]):
        self.remotes = tuple(remotes)

    def find(self, name: str) -> Optional[RouteTable]:
        """Return the first route table with the given name, or None."""
        for remote in self.remotes:
            if remote.name == name:
                return remote
        return None

    def describe(self) -> List[str]:
        lines = []
        for remote in self.remotes:
            lines.extend(remote.describe())
        return lines

    def __iter__(self) -> Iterator[RouteTable]:
        return iter(self.remotes)

    def __len__(self) -> int:
        return len(self.remotes)

    def __repr__(self):
        return f"RemapperConfig(remotes={list(self.remotes)!r})"


def default_config() -> RemapperConfig:
    """Single-table fallback used whenever a config cannot be loaded.

    Keeps the engine observably alive: /  ->  /failed/to/load/config
    """
    logger.info("Creating default OSC Remapper configuration")
    return RemapperConfig([
        RouteTable(FAILED_REMOTE_NAME, DEFAULT_HOST, DEFAULT_PORT, FAILED_MAPPINGS)
    ])


# ============================================================================
# GENERIC DATA HELPERS
# ============================================================================

def _get_string(record: MappingABC, key: str, default: str) -> str:
    value = record.get(key)
    return str(value) if value is not None else default


def _get_port(record: MappingABC, key: str, default: int) -> int:
    """Read an integer port from a number or numeric string.

    Invalid or out-of-range values fall back to the default (logged).
    """
    value = record.get(key)
    if value is None:
        return default

    port = None
    if isinstance(value, int) and not isinstance(value, bool):
        port = value
    elif isinstance(value, float) and value.is_integer():
        port = int(value)
    elif isinstance(value, str):
        try:
            port = int(value.strip())
        except ValueError:
            port = None

    if port is None:
        logger.error(f"Invalid integer value for {key}: {value!r}, using {default}")
        return default
    if port < PORT_MIN or port > PORT_MAX:
        logger.error(f"{key} must be in range {PORT_MIN}-{PORT_MAX}, got {port}, using {default}")
        return default
    return port


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


# ============================================================================
# PARSING
# ============================================================================

def parse_mappings(name: str, mappings_data: Any) -> Dict[str, List[str]]:
    """Convert a generic mappings node into source -> destinations.

    Entries whose value is not a list are skipped. Wildcard pairing rules are
    enforced later by RouteTable.

    Args:
        name: Remote name (for log messages)
        mappings_data: Parsed 'mappings' node

    Returns:
        Dict of source pattern -> destination patterns
    """
    if not isinstance(mappings_data, MappingABC):
        logger.info(f"No mappings found for remote '{name}' (mappings is not a mapping)")
        return {}

    mappings = {}
    for source, targets in mappings_data.items():
        source = str(source)

        if not _is_sequence(targets):
            logger.error(
                f"Mapping for '{source}' must be a list. Found: {type(targets).__name__}"
            )
            logger.error(f"Use format: '{source}: [\"destination\"]' instead of '{source}: \"destination\"'")
            continue

        if any(isinstance(target, (MappingABC, list, tuple)) or target is None for target in targets):
            logger.error(f"Mapping for '{source}' must be a list of addresses. Found: {targets!r}")
            continue

        mappings[source] = [str(target) for target in targets]
        logger.debug(f"Mapping: {source} -> {mappings[source]}")

    return mappings


def parse_remote(record: Any) -> Optional[RouteTable]:
    """Build one route table from a generic remote record.

    Args:
        record: Parsed remote entry (should be a mapping)

    Returns:
        RouteTable, or None if the record is unusable
    """
    if not isinstance(record, MappingABC):
        logger.error(f"Remote entry must be a mapping. Found: {type(record).__name__}")
        return None

    name = _get_string(record, "name", DEFAULT_NAME)
    ip = _get_string(record, "ip", DEFAULT_HOST)
    port = _get_port(record, "port", DEFAULT_PORT)
    logger.debug(f"Remote basic properties: name={name}, ip={ip}, port={port}")

    mappings = parse_mappings(name, record.get("mappings"))
    remote = RouteTable(name, ip, port, mappings)

    logger.debug(f"Created remote '{name}' with {len(remote.mappings)} mappings")
    return remote


def build_config(data: Any) -> RemapperConfig:
    """Assemble a RemapperConfig from parsed generic config data.

    Args:
        data: Result of yaml.safe_load (or any equivalent generic structure)

    Returns:
        RemapperConfig with at least one route table
    """
    try:
        return _build_config(data)
    except Exception as e:
        logger.exception(f"Failed to build OSC Remapper config: {e}")
        return default_config()


def _build_config(data: Any) -> RemapperConfig:
    if data is None:
        logger.error("Config data is empty - file might be empty or invalid")
        return default_config()

    if not isinstance(data, MappingABC):
        logger.error(f"Config root is not a mapping. Found: {type(data).__name__}")
        return default_config()

    remotes_data = data.get("remotes")
    if not _is_sequence(remotes_data):
        found = type(remotes_data).__name__ if remotes_data is not None else "nothing"
        logger.error(f"Config must contain a 'remotes:' list. Found: {found}")
        return default_config()

    remotes = []
    for i, record in enumerate(remotes_data):
        remote = parse_remote(record)
        if remote is None:
            logger.error(f"Failed to parse remote {i}")
            continue
        remotes.append(remote)

    if not remotes:
        logger.error("No usable remotes in config")
        return default_config()

    config = RemapperConfig(remotes)
    logger.info(f"Loaded {len(config)} remote configurations")
    for line in config.describe():
        logger.info(line)

    return config


# ============================================================================
# FILE LOADING
# ============================================================================

def resolve_config_path(config_path: Optional[Union[str, Path]] = None) -> Path:
    """Pick the config path: argument > OSCREMAP_CONFIG env var > packaged default."""
    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(config_path)


def load_config(config_path: Optional[Union[str, Path]] = None) -> RemapperConfig:
    """Load and validate the YAML remapper configuration.

    Never raises: a missing, unreadable or malformed file yields default_config().

    Args:
        config_path: Path to remapper_config.yaml (see resolve_config_path)

    Returns:
        RemapperConfig with at least one route table
    """
    path = resolve_config_path(config_path)
    logger.info(f"Loading OSC Remapper config from: {path.absolute()}")

    if not path.exists():
        logger.error(f"Config file not found: {path.absolute()}")
        return default_config()

    # Binary mode: PyYAML decodes the stream and reports bad bytes as ReaderError
    try:
        with open(path, 'rb') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load OSC Remapper config: {e}")
        return default_config()

    return build_config(data)
