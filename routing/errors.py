"""
Purpose: Exception types for the routing package.
What it does:
Gives adapters a way to signal a bad provider payload and gives the config
loader a way to reject bad environment values.
None of these cross the RouteResolver boundary: adapters turn them into outcomes.
"""


class RoutingError(Exception):
    """Base class for routing errors."""
    pass


class ProviderError(RoutingError):
    """A provider answered, but the payload can't be used as a route."""
    pass


class ConfigError(RoutingError, ValueError):
    """Invalid routing configuration (bad number, unknown provider name, ...)."""
    pass


class NoPathError(ProviderError):
    """The provider answered correctly but found no usable path (0 routes or < 2 points)."""
    pass
