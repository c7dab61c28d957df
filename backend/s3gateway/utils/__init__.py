"""
Utility functions for the gateway.
"""

from s3gateway.utils.formatting import format_size

__all__ = ["format_size"]
