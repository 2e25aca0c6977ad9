"""
Address pattern matching for OSC remapping.

Patterns follow a restricted glob grammar:
    - Literal path: /lx/tempo/beat (matches only itself)
    - Wildcard path: /lx/tempo/* (matches every address nested below /lx/tempo)

No other wildcard position is legal. All tests are plain string operations.

Functions:
    - is_wildcard(pattern): True if pattern ends in "/*"
    - wildcard_prefix(pattern): Pattern with the "/*" suffix stripped
    - matches(address, pattern): Whether an address is covered by a pattern
    - rewrite(address, source, destination): Substitute matched remainder
"""

# ============================================================================
# CONSTANTS
# ============================================================================

WILDCARD_SUFFIX = "/*"
SEPARATOR = "/"


# ============================================================================
# MATCHING
# ============================================================================

def is_wildcard(pattern: str) -> bool:
    """Return True if pattern is a single-level wildcard ("/a/b/*")."""
    return pattern.endswith(WILDCARD_SUFFIX)


def wildcard_prefix(pattern: str) -> str:
    """Strip the "/*" suffix from a wildcard pattern.

    Examples:
        >>> wildcard_prefix("/lx/tempo/*")
        '/lx/tempo'
    """
    return pattern[:-len(WILDCARD_SUFFIX)]


def matches(address: str, pattern: str) -> bool:
    """Check if an OSC address is covered by a source pattern.

    Args:
        address: Concrete OSC address (e.g., "/lx/tempo/beat")
        pattern: Literal or wildcard pattern (e.g., "/lx/tempo/*")

    Returns:
        True for an exact literal match, or when the address lies strictly
        below the wildcard's prefix.

    Examples:
        >>> matches("/a/b/c", "/a/*")
        True
        >>> matches("/a", "/a/*")
        False
        >>> matches("/ab", "/a/*")
        False
    """
    if is_wildcard(pattern):
        return address.startswith(wildcard_prefix(pattern) + SEPARATOR)
    return pattern == address


def rewrite(address: str, source: str, destination: str) -> str:
    """Rewrite a matched address into a destination pattern.

    A literal source yields the destination verbatim. A wildcard source paired
    with a wildcard destination keeps everything after the source prefix,
    including the leading separator:

        rewrite("/lx/tempo/beat", "/lx/tempo/*", "/remote/tempo/*")
        -> "/remote/tempo/beat"

    Args:
        address: Address already confirmed to match source
        source: Source pattern the address matched
        destination: Destination pattern to rewrite into

    Returns:
        Rewritten destination address

    Raises:
        ValueError: If a wildcard source is paired with a literal destination,
            or the address does not lie below the wildcard source
    """
    if not is_wildcard(source):
        return destination

    if not is_wildcard(destination):
        raise ValueError(
            f"Wildcard source '{source}' paired with literal destination '{destination}'"
        )

    source_prefix = wildcard_prefix(source)
    if not address.startswith(source_prefix + SEPARATOR):
        raise ValueError(f"Address '{address}' does not match '{source}'")

    return wildcard_prefix(destination) + address[len(source_prefix):]
