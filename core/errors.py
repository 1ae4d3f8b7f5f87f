"""
    Exception types for the readiness engine.

    Probing never raises these: host faults are downgraded to ProbeResult.absent().
    Only catalog and configuration errors are propagated to the caller.
"""


class ReadinessError(Exception):
    """Base class for readiness engine errors."""


class CatalogError(ReadinessError, ValueError):
    """Raised when a requirement catalog is malformed (unknown kind, bad threshold, ...)."""


class VersionParseError(ReadinessError, ValueError):
    """Raised when a version-like string has no leading dotted numeric part."""


class ConfigError(ReadinessError, ValueError):
    """Raised when an environment setting cannot be parsed."""
