"""
Formatting utilities for the gateway.
"""

import math

SIZE_UNITS = ['B', 'kB', 'MB', 'GB']


def format_size(size_bytes: int) -> str:
    """Format byte size to human readable string.

    Uses decimal (base-1000) units and stops at gigabytes, so larger
    sizes are still expressed in GB.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable string like '1.024 kB' or '0.000 B'
    """
    if size_bytes < 0:
        raise ValueError(f"Size cannot be negative: {size_bytes}")

    magnitude = math.floor(math.log10(size_bytes)) if size_bytes else 0
    order = min(magnitude // 3, len(SIZE_UNITS) - 1)

    return f'{size_bytes / 1000 ** order:.3f} {SIZE_UNITS[order]}'
