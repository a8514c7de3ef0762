"""Router configuration.

RouterConfig is a frozen dataclass, immutable after creation::

    config = RouterConfig(scheme="demoapp")
    config = RouterConfig(scheme="demoapp", placeholder_prefix="$")
"""

import re
from dataclasses import dataclass

from linkmux.errors import ConfigurationError

# RFC 3986 section 3.1
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*$")


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Configuration shared by Router and Navigator.

    ``scheme`` is compared case-insensitively and stored lower-cased.
    With ``strict_scheme=False``, URLs carrying no scheme at all are also
    accepted; a different scheme is always rejected.
    """

    scheme: str
    placeholder_prefix: str = ":"
    strict_scheme: bool = True

    def __post_init__(self) -> None:
        scheme = self.scheme.lower() if isinstance(self.scheme, str) else ""
        if not _SCHEME_RE.match(scheme):
            msg = f"invalid url scheme {self.scheme!r}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "scheme", scheme)

        prefix = self.placeholder_prefix
        if not isinstance(prefix, str) or not prefix:
            msg = "placeholder_prefix must be a non-empty string"
            raise ConfigurationError(msg)
        if any(c in prefix for c in "/?#"):
            msg = f"placeholder_prefix cannot contain '/', '?' or '#', got {prefix!r}"
            raise ConfigurationError(msg)
