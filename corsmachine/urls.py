"""
Origin parsing and comparison.

An origin is the (scheme, host, port) triple from RFC 6454. ``Origin`` header
values carry all three parts while ``Host`` header values carry only host and
port, so the comparisons are exposed separately and the caller decides which
ones matter.

References:
- RFC 6454 Section 5: Comparing Origins
- RFC 7230 Section 5.4: Host
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union
from urllib.parse import urlsplit

from .constants import DEFAULT_PORTS, NULL_ORIGIN
from .exceptions import OriginParseError


@dataclass(frozen=True)
class ParsedUrl:
    """A fully resolved origin.

    Attributes:
        scheme: Lower-cased scheme, or None for bare ``host[:port]`` values
        host: Lower-cased host name (IPv6 literals without brackets), or None
              for the opaque ``null`` origin
        port: Explicit port, or None when the value relied on the default
    """

    scheme: Optional[str]
    host: Optional[str]
    port: Optional[int] = None

    @property
    def is_opaque(self) -> bool:
        """True for the ``null`` origin, which is never equal to anything."""
        return self.host is None

    @property
    def origin(self) -> str:
        """Serialized origin, e.g. ``https://app.example.com:8443``."""
        if self.is_opaque:
            return NULL_ORIGIN
        host = f"[{self.host}]" if ":" in self.host else self.host
        result = f"{self.scheme}://{host}" if self.scheme else host
        if self.port is not None:
            result += f":{self.port}"
        return result

    def effective_port(self, fallback_scheme: Optional[str] = None) -> Optional[int]:
        """Explicit port, or the default port of the scheme.

        Args:
            fallback_scheme: Scheme used for the default when this URL has none

        Returns:
            Port number, or None when neither a port nor a known scheme is available
        """
        if self.port is not None:
            return self.port
        return DEFAULT_PORTS.get(self.scheme or fallback_scheme or "")

    def key(self) -> Tuple[Optional[str], Optional[str], Optional[int]]:
        """Comparison key with the port resolved."""
        return (self.scheme, self.host, self.effective_port())

    def is_host_equal(self, other: "ParsedUrl") -> bool:
        if self.is_opaque or other.is_opaque:
            return False
        return self.host == other.host

    def is_port_equal(self, other: "ParsedUrl") -> bool:
        # A Host value has no scheme of its own so it borrows the other side's default
        if self.is_opaque or other.is_opaque:
            return False
        return self.effective_port(other.scheme) == other.effective_port(self.scheme)

    def is_scheme_equal(self, other: "ParsedUrl") -> bool:
        if self.is_opaque or other.is_opaque:
            return False
        return self.scheme == other.scheme

    def is_same_origin(self, other: "ParsedUrl") -> bool:
        """RFC 6454 origin equality: scheme, host and port all match."""
        return (
            self.is_host_equal(other)
            and self.is_port_equal(other)
            and self.is_scheme_equal(other)
        )

    def __str__(self) -> str:
        return self.origin


def parse_url(value: Union[str, ParsedUrl]) -> ParsedUrl:
    """Parse an origin or a ``host[:port]`` authority.

    Any path, query or fragment is ignored. The literal ``null`` parses to the
    opaque origin.

    Args:
        value: Header value such as ``https://app.example.com`` or
               ``api.example.com:8080``; a ParsedUrl is returned unchanged

    Returns:
        ParsedUrl with scheme and host lower-cased

    Raises:
        OriginParseError: If the value is empty, has no host, carries userinfo
            or has an invalid port
    """
    if isinstance(value, ParsedUrl):
        return value
    if not isinstance(value, str):
        raise OriginParseError(value, "expected a string")

    text = value.strip()
    if not text:
        raise OriginParseError(value, "empty value")
    if text.lower() == NULL_ORIGIN:
        return ParsedUrl(scheme=None, host=None)

    # Without a scheme, urlsplit would read "localhost:3000" as scheme "localhost"
    if "://" not in text:
        text = "//" + text

    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as e:
        raise OriginParseError(value, str(e)) from e

    if parts.username is not None:
        raise OriginParseError(value, "userinfo is not allowed")

    host = parts.hostname
    if not host:
        raise OriginParseError(value, "missing host")

    return ParsedUrl(scheme=parts.scheme.lower() or None, host=host, port=port)
