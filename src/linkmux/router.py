"""URL router: ordered pattern registry with first-accepting-match dispatch.

Inspired by go-chi/mux's Mux, with registration order as the only precedence
rule: candidates are tried first-registered-first, and a handler that
declines lets dispatch fall through to the next structural match.
"""

import logging
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass
from functools import reduce

from linkmux.config import RouterConfig
from linkmux.errors import InvalidPatternError
from linkmux.patterns import (
    ParsedURL,
    Pattern,
    RouteParameters,
    compile_pattern,
    join_patterns,
    parse_url,
)
from linkmux.route import Handler, Route, route_name

logger = logging.getLogger(__name__)

matched_pattern: ContextVar[str] = ContextVar("matched_pattern")
dispatch_url: ContextVar[str] = ContextVar("dispatch_url")

type Middleware = Callable[[Handler], Handler]


@dataclass(slots=True, frozen=True)
class _Entry:
    pattern: Pattern
    route: Route


class Router:
    """Registry and matching engine for one url scheme.

    Usage::

        router = Router(RouterConfig(scheme="demoapp"))
        router.register(PlayVideoRoute())
        router.dispatch("demoapp://play_video/abcd1234?autoplay=true")

    The registry is an immutable tuple replaced on every registration, so a
    dispatch (including a reentrant one) always iterates a stable snapshot.
    """

    __slots__ = ("_chains", "_config", "_entries", "_middleware")
    _config: RouterConfig
    _entries: tuple[_Entry, ...]
    _middleware: tuple[Middleware, ...]
    _chains: dict[tuple[int, int], Handler]

    def __init__(self, config: RouterConfig) -> None:
        self._config = config
        self._entries = ()
        self._middleware = ()
        self._chains = {}

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def routes(self) -> tuple[tuple[str, Route], ...]:
        """Registered (pattern, route) pairs in registration order."""
        return tuple((e.pattern.text, e.route) for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def register(self, route: Route) -> None:
        """Append an entry for each of route's patterns.

        All patterns are compiled before any is added, so an invalid pattern
        rejects the whole route. Duplicate patterns are allowed; each is an
        independent candidate.
        """
        declared = route.patterns()
        if isinstance(declared, str):
            msg = f"route {route_name(route)} must return a sequence of patterns"
            raise InvalidPatternError(msg, pattern=declared)
        texts = tuple(declared)
        if not texts:
            msg = f"route {route_name(route)} declares no patterns"
            raise InvalidPatternError(msg)
        compiled = tuple(
            compile_pattern(text, self._config.placeholder_prefix) for text in texts
        )
        self._entries = self._entries + tuple(_Entry(p, route) for p in compiled)
        for p in compiled:
            logger.debug("registered %s -> %s", p.text, route_name(route))

    def include(self, router: Router, prefix: str = "") -> None:
        """Append all of router's entries, in order, optionally under prefix.

        Middleware of the included router is not carried over.
        """
        entries = router._entries
        if prefix:
            prefix_pattern = compile_pattern(prefix, self._config.placeholder_prefix)
            entries = tuple(
                _Entry(join_patterns(prefix_pattern, e.pattern), e.route)
                for e in entries
            )
        self._entries = self._entries + entries

    def use(self, *middleware: Middleware) -> None:
        """Adds handler middleware, applied outermost-first."""
        self._middleware = self._middleware + middleware

    def dispatch(self, url: str) -> bool:
        """Match url and invoke handlers until one accepts.

        Returns True if a handler accepted the url, otherwise False. Never
        raises: malformed urls, foreign schemes and handler errors all report
        False.
        """
        parsed = self._parse(url)
        if parsed is None:
            return False

        entries, middleware = self._entries, self._middleware
        matched = False
        for entry in entries:
            bound = entry.pattern.match(parsed.segments)
            if bound is None:
                continue
            matched = True
            params = RouteParameters.combine(entry.pattern.text, bound, parsed.query)
            if self._invoke(entry, params, url, middleware):
                return True

        if matched:
            logger.debug("unhandled %r: every matching route declined", url)
        else:
            logger.debug("unhandled %r: no matching route", url)
        return False

    def resolve(self, url: str) -> list[RouteParameters]:
        """Every structural match for url, in registration order.

        No handler is invoked. Useful for spotting patterns shadowed by
        earlier registrations.
        """
        parsed = self._parse(url)
        if parsed is None:
            return []
        results: list[RouteParameters] = []
        for entry in self._entries:
            bound = entry.pattern.match(parsed.segments)
            if bound is not None:
                results.append(
                    RouteParameters.combine(entry.pattern.text, bound, parsed.query)
                )
        return results

    def _parse(self, url: str) -> ParsedURL | None:
        try:
            parsed = parse_url(url)
        except (TypeError, ValueError) as e:
            logger.debug("unhandled %r: malformed url (%s)", url, e)
            return None
        if parsed.scheme == self._config.scheme:
            return parsed
        if not parsed.scheme and not self._config.strict_scheme:
            return parsed
        logger.debug(
            "unhandled %r: scheme %r is not %r", url, parsed.scheme, self._config.scheme
        )
        return None

    def _invoke(
        self,
        entry: _Entry,
        params: RouteParameters,
        url: str,
        middleware: tuple[Middleware, ...],
    ) -> bool:
        try:
            handler = self._chain(entry, middleware)
            with matched_pattern.set(entry.pattern.text), dispatch_url.set(url):
                return bool(handler(params))
        except Exception:  # noqa: BLE001  - dispatch reports every failure as unhandled
            logger.exception(
                "route %s raised for %r on %s; treating as declined",
                route_name(entry.route),
                url,
                entry.pattern.text,
            )
            return False

    def _chain(self, entry: _Entry, middleware: tuple[Middleware, ...]) -> Handler:
        """Wrapped handler for entry, built once per middleware stack."""
        # middleware only grows, so its length identifies the stack
        key = (id(entry), len(middleware))
        handler = self._chains.get(key)
        if handler is None:
            handler = reduce(
                lambda h, m: m(h), reversed(middleware), entry.route.handle
            )
            self._chains[key] = handler
        return handler


def format_routes(router: Router) -> str:
    """Format registered routes as a column-aligned list in dispatch order.

        1   play_video/:videoId   PlayVideoRoute
        2   watch/:videoId        PlayVideoRoute
        3   settings              settings_handler
    """
    rows = [
        (str(i), pattern, route_name(route))
        for i, (pattern, route) in enumerate(router.routes, start=1)
    ]
    if not rows:
        return ""
    index_w = max(len(r[0]) for r in rows)
    pattern_w = max(len(r[1]) for r in rows)
    return "\n".join(
        f"{index:<{index_w}}   {pattern:<{pattern_w}}   {name}"
        for index, pattern, name in rows
    )
