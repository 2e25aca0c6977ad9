"""Validation rules for a single source -> destinations mapping entry."""

from typing import Optional, Sequence, Tuple

from oscremap.pattern import is_wildcard


def validate_mapping(source: str, destinations: Sequence[str]) -> Tuple[bool, Optional[str]]:
    """Validate one mapping entry before it is stored in a route table.

    Rules, checked in order:
        1. At least one destination is required.
        2. A wildcard source cannot fan out (exactly one destination).
        3. A wildcard source must map to a wildcard destination.
    Literal sources may have any number of literal or wildcard destinations.

    Args:
        source: Source pattern (mapping key)
        destinations: Proposed destination patterns

    Returns:
        Tuple of (is_valid, error_message):
            - is_valid: True if the entry may be stored
            - error_message: Human-readable reason if invalid, None if valid

    Examples:
        >>> validate_mapping("/lx/tempo/*", ["/remote/tempo/*"])
        (True, None)
        >>> validate_mapping("/lx/tempo/*", ["/out/tempo"])
        (False, "Wildcard source '/lx/tempo/*' must map to wildcard destination, found: '/out/tempo'")
    """
    if len(destinations) == 0:
        return False, f"Mapping for '{source}' has no destinations"

    if is_wildcard(source):
        if len(destinations) > 1:
            return False, (
                f"Wildcard source '{source}' cannot fan out to multiple destinations "
                f"({len(destinations)} found: {list(destinations)})"
            )

        destination = destinations[0]
        if not is_wildcard(destination):
            return False, (
                f"Wildcard source '{source}' must map to wildcard destination, "
                f"found: '{destination}'"
            )

    return True, None
