"""Navigator: the single entry point the application talks to.

Owns the Router and the full, ordered list of routes. The OS integration
shim only ever calls ``open(url)``.
"""

import logging
from collections.abc import Iterable, Sequence

from linkmux.config import RouterConfig
from linkmux.route import Route
from linkmux.router import Middleware, Router

logger = logging.getLogger(__name__)


class Navigator:
    """Registers every known route at startup and forwards urls to the Router.

    Route order is part of the application's contract: earlier routes win
    when several patterns match the same url.

    Example:
        navigator = Navigator(
            RouterConfig(scheme="demoapp"),
            [PlayVideoRoute(), SettingsRoute()],
        )
        navigator.initialize()
        if not navigator.open(url):
            show_error("Link not supported")
    """

    __slots__ = ("_config", "_middleware", "_router", "_routes")
    _router: Router | None

    def __init__(
        self,
        config: RouterConfig,
        routes: Iterable[Route],
        *,
        middleware: Sequence[Middleware] = (),
    ) -> None:
        self._config = config
        self._routes = tuple(routes)
        self._middleware = tuple(middleware)
        self._router = None

    @property
    def initialized(self) -> bool:
        return self._router is not None

    @property
    def router(self) -> Router:
        if self._router is None:
            msg = "Navigator is not initialized"
            raise RuntimeError(msg)
        return self._router

    def initialize(self) -> None:
        """Build the Router and register every route in order.

        Idempotent. Invalid patterns propagate as InvalidPatternError and
        leave the navigator uninitialized.
        """
        if self._router is not None:
            return
        router = Router(self._config)
        router.use(*self._middleware)
        for route in self._routes:
            router.register(route)
        self._router = router
        logger.info(
            "navigator for %s:// initialized with %d patterns from %d routes",
            self._config.scheme,
            len(router),
            len(self._routes),
        )

    def open(self, url: str) -> bool:
        """Dispatch url, returning whether a route handled it.

        A url can arrive before startup finished (e.g. the app was launched
        by the link), so an uninitialized navigator initializes itself first.
        That first initialization can raise InvalidPatternError, the same
        programmer error initialize() reports; once initialized, open() never
        raises.
        """
        if self._router is None:
            logger.debug("open(%r) before initialize(), initializing now", url)
            self.initialize()
        return self.router.dispatch(url)
