# /// script
# requires-python = ">=3.14"
# dependencies = [
#     "linkmux[otel]",
#     "opentelemetry-sdk>=1.39.1,<2.0.0",
# ]
#
# [tool.uv.sources]
# linkmux = { path = "../", editable = true }
# ///
"""Deep link navigation demo.

Registers a handful of routes for the ``demoapp://`` scheme, then feeds urls
through the Navigator the way an OS integration shim would. Spans are
printed from an in-memory exporter.
"""

import logging
import sys

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from linkmux import Navigator, RouteParameters, RouterConfig, format_routes, route
from linkmux.middleware.otel import otel

VIDEOS = {"abcd1234": "Intro to linkmux", "ffff0000": "Advanced routing"}


class PlayVideoRoute:
    """Plays a known video, declines unknown ids."""

    def patterns(self) -> list[str]:
        return ["play_video/:videoId", "v/:videoId"]

    def handle(self, parameters: RouteParameters) -> bool:
        title = VIDEOS.get(parameters["videoId"])
        if title is None:
            return False
        autoplay = parameters.get("autoplay") == "true"
        print(f"> playing {title!r} (autoplay={autoplay})")
        return True


@route("play_video/:videoId")
def video_not_found(params: RouteParameters) -> bool:
    print(f"> video {params['videoId']} not found")
    return True


@route("settings", "settings/:section")
def settings(params: RouteParameters) -> bool:
    print(f"> settings {params.get('section', 'main')}")
    return True


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    navigator = Navigator(
        RouterConfig(scheme="demoapp"),
        # order matters: PlayVideoRoute falls through to video_not_found
        [PlayVideoRoute(), video_not_found, settings],
        middleware=[otel(tracer_provider=provider)],
    )
    navigator.initialize()
    print(format_routes(navigator.router))

    urls = sys.argv[1:] or [
        "demoapp://play_video/abcd1234?autoplay=true",
        "demoapp://play_video/zzzz",
        "demoapp://settings/privacy",
        "demoapp://unknown",
        "other://settings",
    ]
    for url in urls:
        if not navigator.open(url):
            print(f"> cannot open {url}")

    for span in exporter.get_finished_spans():
        print(f"span {span.name} {dict(span.attributes or {})}")


if __name__ == "__main__":
    main()
