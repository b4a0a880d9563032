"""Error types raised by the downmix core."""

from __future__ import annotations


class ValidationError(ValueError):
    """Malformed input: bad buffer shape, mismatched channels, invalid rate or option."""
