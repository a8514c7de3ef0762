"""linkmux exception hierarchy.

Only raised for programmer errors at configuration and registration time.
Dispatch never raises: every runtime failure is reported as "unhandled".
"""


class LinkmuxError(Exception):
    """Base for all linkmux errors."""


class ConfigurationError(LinkmuxError, ValueError):
    """Raised when a RouterConfig is invalid."""


class InvalidPatternError(LinkmuxError, ValueError):
    """Raised when a route pattern cannot be compiled.

    ``pattern`` is the offending pattern text, or ``None`` when the route
    declared no patterns at all.
    """

    def __init__(self, reason: str, pattern: str | None = None) -> None:
        self.reason = reason
        self.pattern = pattern
        msg = f"{reason}: {pattern!r}" if pattern is not None else reason
        super().__init__(msg)
