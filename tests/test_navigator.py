import logging

import pytest
from conftest import RecordingRoute

from linkmux import Navigator, Route, RouterConfig, format_routes
from linkmux.errors import ConfigurationError, InvalidPatternError
from linkmux.patterns import RouteParameters
from linkmux.route import FunctionRoute, route


class PlayVideoRoute:
    """Declines unknown video ids."""

    def __init__(self, catalog: set[str]) -> None:
        self.catalog = catalog
        self.played: list[tuple[str, bool]] = []

    def patterns(self) -> list[str]:
        return ["play_video/:videoId", "v/:videoId"]

    def handle(self, parameters: RouteParameters) -> bool:
        video_id = parameters["videoId"]
        if video_id not in self.catalog:
            return False
        self.played.append((video_id, parameters.get("autoplay") == "true"))
        return True


def test_open_dispatches_in_route_order() -> None:
    player = PlayVideoRoute({"abcd1234"})
    not_found = RecordingRoute(["play_video/:anything"])
    navigator = Navigator(RouterConfig(scheme="demoapp"), [player, not_found])
    navigator.initialize()

    assert navigator.open("demoapp://play_video/abcd1234?autoplay=true") is True
    assert player.played == [("abcd1234", True)]
    assert not_found.calls == []

    assert navigator.open("demoapp://play_video/missing") is True
    assert dict(not_found.calls[0]) == {"anything": "missing"}

    assert navigator.open("demoapp://v/abcd1234") is True
    assert navigator.open("demoapp://v/missing") is False
    assert navigator.open("other://play_video/abcd1234") is False


def test_open_before_initialize_initializes() -> None:
    settings = RecordingRoute(["settings"])
    navigator = Navigator(RouterConfig(scheme="demoapp"), [settings])
    assert navigator.initialized is False
    assert navigator.open("demoapp://settings") is True
    assert navigator.initialized is True


def test_initialize_is_idempotent(caplog: pytest.LogCaptureFixture) -> None:
    navigator = Navigator(RouterConfig(scheme="demoapp"), [RecordingRoute(["a", "b"])])
    with caplog.at_level(logging.INFO, logger="linkmux.navigator"):
        navigator.initialize()
        router = navigator.router
        navigator.initialize()
    assert navigator.router is router
    assert len(router) == 2
    assert caplog.text.count("initialized with 2 patterns from 1 routes") == 1


def test_router_before_initialize() -> None:
    navigator = Navigator(RouterConfig(scheme="demoapp"), [])
    with pytest.raises(RuntimeError, match="not initialized"):
        navigator.router


def test_initialize_fails_fast_on_invalid_pattern() -> None:
    navigator = Navigator(
        RouterConfig(scheme="demoapp"),
        [RecordingRoute(["settings"]), RecordingRoute(["user/:id/:id"])],
    )
    with pytest.raises(InvalidPatternError):
        navigator.initialize()
    assert navigator.initialized is False


def test_open_before_initialize_raises_on_invalid_pattern() -> None:
    navigator = Navigator(RouterConfig(scheme="demoapp"), [RecordingRoute(["a//b"])])
    with pytest.raises(InvalidPatternError):
        navigator.open("demoapp://a")
    assert navigator.initialized is False


def test_routes_are_captured_at_construction() -> None:
    routes = [RecordingRoute(["settings"])]
    navigator = Navigator(RouterConfig(scheme="demoapp"), iter(routes))
    navigator.initialize()
    assert navigator.open("demoapp://settings") is True


def test_middleware_is_applied() -> None:
    seen: list[str] = []

    def audit(handler):
        def wrapped(params: RouteParameters) -> bool:
            seen.append(params.matched_pattern)
            return handler(params)

        return wrapped

    navigator = Navigator(
        RouterConfig(scheme="demoapp"),
        [RecordingRoute(["settings"])],
        middleware=[audit],
    )
    assert navigator.open("demoapp://settings") is True
    assert seen == ["settings"]


def test_many_routes() -> None:
    """A full application registers dozens of routes as its navigation backbone."""
    routes: list[FunctionRoute] = []
    for i in range(77):

        @route(f"screen{i}/:id", f"screen{i}/:id/detail/:detail")
        def handler(params: RouteParameters, i: int = i) -> bool:
            return params["id"] == str(i)

        routes.append(handler)

    navigator = Navigator(RouterConfig(scheme="demoapp"), routes)
    navigator.initialize()
    assert len(navigator.router) == 154
    assert navigator.open("demoapp://screen76/76") is True
    assert navigator.open("demoapp://screen40/40/detail/x") is True
    assert navigator.open("demoapp://screen40/41") is False
    assert len(format_routes(navigator.router).splitlines()) == 154


def test_function_route_satisfies_protocol() -> None:
    @route("settings")
    def settings(params: RouteParameters) -> bool:
        return True

    assert isinstance(settings, Route)
    assert isinstance(PlayVideoRoute(set()), Route)
    assert settings.patterns() == ("settings",)
    assert settings.name.endswith("settings")


def test_route_decorator_requires_pattern() -> None:
    with pytest.raises(InvalidPatternError):
        route()


# --- Config -------------------------------------------------------------------
def test_config_normalizes_scheme() -> None:
    assert RouterConfig(scheme="DemoApp").scheme == "demoapp"


@pytest.mark.parametrize("scheme", ["", "1app", "demo app", "demo://", None])
def test_config_rejects_bad_scheme(scheme: object) -> None:
    with pytest.raises(ConfigurationError):
        RouterConfig(scheme=scheme)  # type: ignore[arg-type]


@pytest.mark.parametrize("prefix", ["", "/", "?", "#:"])
def test_config_rejects_bad_prefix(prefix: str) -> None:
    with pytest.raises(ConfigurationError):
        RouterConfig(scheme="demoapp", placeholder_prefix=prefix)


def test_config_is_frozen() -> None:
    config = RouterConfig(scheme="demoapp")
    with pytest.raises(AttributeError):
        config.scheme = "other"  # type: ignore[misc]
