"""Route protocol and function-backed routes."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from linkmux.errors import InvalidPatternError
from linkmux.patterns import RouteParameters

type Handler = Callable[[RouteParameters], bool]


@runtime_checkable
class Route(Protocol):
    """A unit of routable behaviour.

    ``patterns()`` lists the patterns to register, in order. ``handle()``
    returns True once the request is fully handled, or False to decline so
    dispatch falls through to the next matching pattern. Invalid parameter
    content is a decline, not an exception.
    """

    def patterns(self) -> Sequence[str]: ...

    def handle(self, parameters: RouteParameters) -> bool: ...


@dataclass(slots=True, frozen=True)
class FunctionRoute:
    """Route backed by a plain handler function."""

    pattern_texts: tuple[str, ...]
    handler: Handler

    @property
    def name(self) -> str:
        return _qualname(self.handler)

    def patterns(self) -> Sequence[str]:
        return self.pattern_texts

    def handle(self, parameters: RouteParameters) -> bool:
        return self.handler(parameters)


def route(*patterns: str) -> Callable[[Handler], FunctionRoute]:
    """Decorator turning a handler function into a Route.

    Example:
        @route("play_video/:videoId", "watch/:videoId")
        def play_video(params: RouteParameters) -> bool:
            return player.play(params["videoId"])

        router.register(play_video)
    """
    if not patterns:
        msg = "route() requires at least one pattern"
        raise InvalidPatternError(msg)

    def decorator(handler: Handler) -> FunctionRoute:
        return FunctionRoute(pattern_texts=patterns, handler=handler)

    return decorator


def route_name(route: Route) -> str:
    """Human-readable name for diagnostics."""
    name = getattr(route, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(route).__qualname__


def _qualname(obj: object) -> str:
    """Extract __qualname__ from a callable, falling back to repr."""
    return str(obj.__qualname__) if hasattr(obj, "__qualname__") else repr(obj)
