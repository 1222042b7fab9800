"""
Exception types raised by the tierlist builder.

Each one marks a recoverable seam: callers catch them, log, and carry on
with a degraded run rather than aborting.
"""


class TierlistError(Exception):
    """Base class for all tierlist builder errors."""


class ConfigError(TierlistError):
    """A configuration entry (override, tag entry, item id) is malformed."""


class GraphSourceError(TierlistError):
    """The dependency graph source raised or returned unusable data."""


class GenerationError(TierlistError):
    """A single item kind failed to generate."""

    def __init__(self, kind: str, cause: Exception):
        super().__init__(f"{kind} tierlist generation failed: {type(cause).__name__}: {cause}")
        self.kind = kind
        self.cause = cause
