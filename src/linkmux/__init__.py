from importlib.metadata import version

from .config import RouterConfig
from .errors import ConfigurationError, InvalidPatternError, LinkmuxError
from .navigator import Navigator
from .patterns import RouteParameters
from .route import FunctionRoute, Route, route
from .router import Router, dispatch_url, format_routes, matched_pattern

__all__ = [
    "ConfigurationError",
    "FunctionRoute",
    "InvalidPatternError",
    "LinkmuxError",
    "Navigator",
    "Route",
    "RouteParameters",
    "Router",
    "RouterConfig",
    "__version__",
    "dispatch_url",
    "format_routes",
    "matched_pattern",
    "route",
]

__version__ = version("linkmux")
