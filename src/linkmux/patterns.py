"""Compiled route patterns, URL parsing and segment-by-segment matching.

Patterns are compiled once, at registration, into a tuple of literal and
placeholder segment descriptors, so dispatch never re-parses pattern text.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Never
from urllib.parse import parse_qsl, unquote, urlsplit

from linkmux.errors import InvalidPatternError


class FrozenDict[K, V](dict[K, V]):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._hash: int | None = None

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self.items()))
        return self._hash

    def _immutable(self, *args, **kwargs) -> Never:
        msg = "FrozenDict is immutable"
        raise TypeError(msg)

    __setitem__ = __delitem__ = clear = pop = popitem = setdefault = update = _immutable
    __ior__ = _immutable


@dataclass(slots=True, frozen=True)
class LiteralSegment:
    value: str


@dataclass(slots=True, frozen=True)
class PlaceholderSegment:
    name: str


type Segment = LiteralSegment | PlaceholderSegment


@dataclass(slots=True, frozen=True)
class Pattern:
    """A compiled pattern: the source text plus its segment descriptors."""

    text: str
    segments: tuple[Segment, ...]

    @property
    def placeholder_names(self) -> tuple[str, ...]:
        return tuple(
            seg.name for seg in self.segments if isinstance(seg, PlaceholderSegment)
        )

    def match(self, segments: tuple[str, ...]) -> dict[str, str] | None:
        """Structurally match url path segments against this pattern.

        Returns the placeholder bindings, or None when segment counts differ,
        a literal segment is not equal, or a placeholder would bind an empty
        segment.
        """
        if len(segments) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for expected, seg in zip(self.segments, segments, strict=True):
            if isinstance(expected, PlaceholderSegment):
                if not seg:
                    return None
                params[expected.name] = seg
            elif expected.value != seg:
                return None
        return params


def _split_path(path: str) -> list[str]:
    """Split on "/" dropping one leading and one trailing empty segment."""
    parts = path.split("/")
    if parts and parts[0] == "":
        parts = parts[1:]
    if parts and parts[-1] == "":
        parts = parts[:-1]
    return parts


def compile_pattern(text: str, placeholder_prefix: str = ":") -> Pattern:
    """Compile pattern text such as ``play_video/:videoId``.

    A leading or trailing "/" is ignored. Raises InvalidPatternError for an
    empty pattern, a pattern with zero segments, an empty interior segment,
    a placeholder without a name, a placeholder name used twice, or a segment
    containing "?" or "#".
    """
    if not isinstance(text, str) or not text:
        msg = "pattern must be a non-empty string"
        raise InvalidPatternError(msg, pattern=text if isinstance(text, str) else None)

    parts = _split_path(text)
    if not parts:
        raise InvalidPatternError("pattern has no segments", pattern=text)

    segments: list[Segment] = []
    seen: set[str] = set()
    for part in parts:
        if not part:
            raise InvalidPatternError("pattern has an empty segment", pattern=text)
        if "?" in part or "#" in part:
            msg = "pattern segments cannot contain '?' or '#'"
            raise InvalidPatternError(msg, pattern=text)
        if part.startswith(placeholder_prefix):
            name = part[len(placeholder_prefix) :]
            if not name:
                raise InvalidPatternError("placeholder has no name", pattern=text)
            if name in seen:
                msg = f"placeholder {name!r} appears more than once"
                raise InvalidPatternError(msg, pattern=text)
            seen.add(name)
            segments.append(PlaceholderSegment(name))
        else:
            segments.append(LiteralSegment(part))
    return Pattern(text=text, segments=tuple(segments))


def join_patterns(prefix: Pattern, pattern: Pattern) -> Pattern:
    """Prepend prefix's segments to pattern, as used when including routers."""
    clash = set(prefix.placeholder_names) & set(pattern.placeholder_names)
    text = prefix.text.rstrip("/") + "/" + pattern.text.lstrip("/")
    if clash:
        msg = f"placeholder {sorted(clash)[0]!r} appears more than once"
        raise InvalidPatternError(msg, pattern=text)
    return Pattern(text=text, segments=prefix.segments + pattern.segments)


@dataclass(slots=True, frozen=True)
class ParsedURL:
    scheme: str
    segments: tuple[str, ...]
    query: FrozenDict[str, str] = field(default_factory=FrozenDict)


def parse_url(url: str) -> ParsedURL:
    """Parse an incoming url into scheme, decoded path segments and query.

    For ``demoapp://play_video/abcd1234?autoplay=true`` the authority
    ("play_video") is the first path segment. Segments are percent-decoded
    after splitting, so an encoded "/" stays inside its segment. Repeated
    query keys keep their last value.

    Raises ValueError (or TypeError for non-str input) on malformed urls.
    """
    if not isinstance(url, str):
        msg = f"url must be a str, got {type(url).__name__}"
        raise TypeError(msg)
    parts = urlsplit(url)
    path = parts.netloc + parts.path if parts.netloc else parts.path
    segments = tuple(unquote(seg) for seg in _split_path(path))
    query = FrozenDict(parse_qsl(parts.query, keep_blank_values=True))
    return ParsedURL(scheme=parts.scheme, segments=segments, query=query)


@dataclass(slots=True, frozen=True, eq=False)
class RouteParameters(Mapping[str, str]):
    """Parameters extracted for one dispatch.

    Path placeholder bindings and query pairs share one namespace; a path
    binding overrides a query key of the same name. Lookups of missing keys
    behave like any Mapping: ``params.get("missing")`` is None. Equality is
    Mapping equality over the values, so ``params == {"id": "1"}`` holds.
    """

    matched_pattern: str
    values: FrozenDict[str, str] = field(default_factory=FrozenDict)
    path_names: tuple[str, ...] = ()

    @classmethod
    def combine(
        cls,
        matched_pattern: str,
        path_params: Mapping[str, str],
        query: Mapping[str, str],
    ) -> RouteParameters:
        return cls(
            matched_pattern=matched_pattern,
            values=FrozenDict({**query, **path_params}),
            path_names=tuple(path_params),
        )

    @property
    def path_params(self) -> dict[str, str]:
        return {name: self.values[name] for name in self.path_names}

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __hash__(self) -> int:
        return hash(self.values)
