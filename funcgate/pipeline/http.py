"""
Request and response values passed through the middleware chain.

A Request is frozen once received. A Response is a builder that stays
mutable until the chain hands it back to the host.
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


class HeaderMap(Mapping):
    """Read-only header mapping with case-insensitive keys."""

    def __init__(self, headers: Optional[Mapping[str, str]] = None):
        items = headers.items() if headers is not None else ()
        self._items: Dict[str, Tuple[str, str]] = {
            name.lower(): (name, value) for name, value in items
        }

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"HeaderMap({dict(self.items())!r})"


@dataclass(frozen=True)
class Request:
    """An inbound HTTP call as seen by middleware and handlers."""
    method: str
    path: str
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""
    query: Mapping[str, str] = field(default_factory=dict)
    host_url: Optional[str] = None

    def __post_init__(self):
        # Normalise whatever mapping the caller passed
        if not isinstance(self.headers, HeaderMap):
            object.__setattr__(self, 'headers', HeaderMap(self.headers))
        object.__setattr__(self, 'method', self.method.upper())
        object.__setattr__(self, 'query', MappingProxyType(dict(self.query)))

    def create_response(self, status_code: int = HTTPStatus.OK) -> 'Response':
        return Response(status_code=int(status_code))


@dataclass
class Response:
    """Outbound response builder."""
    status_code: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        self.status_code = int(self.status_code)

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get('Content-Type')

    def set_header(self, name: str, value: str) -> 'Response':
        self.headers[name] = value
        return self

    def write_string(self, text: str, encoding: str = 'utf-8') -> 'Response':
        self.body += text.encode(encoding)
        return self


def fallback_response(status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR) -> Response:
    """Fresh response substituted when the real handler produced none."""
    return Response(
        status_code=int(status_code),
        headers={'Content-Type': 'text/plain; charset=utf-8'},
        body=b""
    )
