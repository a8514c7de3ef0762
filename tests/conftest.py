from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from linkmux import Router, RouterConfig
from linkmux.patterns import RouteParameters


@dataclass
class RecordingRoute:
    """Route that records every invocation and returns a fixed outcome."""

    pattern_texts: Sequence[str]
    outcome: bool = True
    name: str = "recording"
    calls: list[RouteParameters] = field(default_factory=list)

    def patterns(self) -> Sequence[str]:
        return self.pattern_texts

    def handle(self, parameters: RouteParameters) -> bool:
        self.calls.append(parameters)
        return self.outcome


@pytest.fixture
def config() -> RouterConfig:
    return RouterConfig(scheme="demoapp")


@pytest.fixture
def router(config: RouterConfig) -> Router:
    return Router(config)
