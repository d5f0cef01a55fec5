"""
Core data models for the CORS analyzer.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Tuple, Union

HeaderValue = Union[str, int, Tuple[str, ...]]


class MultiValueHeaders:
    """
    Multi-value, case-insensitive headers container.

    HTTP headers are case-insensitive per RFC 7230, and the same header can appear
    multiple times. The analyzer only ever looks at the first value of the
    headers it consumes, but the full list is kept so callers can inspect it.

    Example::

        headers = MultiValueHeaders()
        headers.add('Origin', 'https://app.example.com')
        headers.add('origin', 'https://evil.example.com')
        headers.get('ORIGIN')      # Returns 'https://app.example.com' (first value)
        headers.get_all('origin')  # Returns both values
    """

    def __init__(self, data=None):
        """
        Initialize headers from dict, list of tuples, or another MultiValueHeaders.

        Args:
            data: Can be:
                - Dict[str, str] or Dict[str, List[str]]
                - List of (name, value) tuples
                - Another MultiValueHeaders instance
                - None
        """
        # Internal storage: Dict[lowercase_name, List[Tuple[original_name, value]]]
        self._headers: Dict[str, List[Tuple[str, str]]] = {}

        if data is not None:
            if isinstance(data, MultiValueHeaders):
                self._headers = {k: list(v) for k, v in data._headers.items()}
            elif isinstance(data, Mapping):
                for key, value in data.items():
                    if isinstance(value, (list, tuple)):
                        for v in value:
                            self.add(key, v)
                    else:
                        self.add(key, value)
            elif isinstance(data, (list, tuple)):
                for key, value in data:
                    self.add(key, value)

    def add(self, name: str, value: str) -> None:
        """
        Add a header value, allowing multiple values for the same name.

        Args:
            name: Header name (case-insensitive)
            value: Header value
        """
        name_lower = name.lower()
        if name_lower not in self._headers:
            self._headers[name_lower] = []
        self._headers[name_lower].append((name, value))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get the first value for a header name.

        Args:
            name: Header name (case-insensitive)
            default: Default value if header not found

        Returns:
            First header value or default
        """
        if not isinstance(name, str):
            return default

        name_lower = name.lower()
        if name_lower in self._headers and self._headers[name_lower]:
            return self._headers[name_lower][0][1]
        return default

    def get_all(self, name: str) -> List[str]:
        """
        Get all values for a header name.

        Args:
            name: Header name (case-insensitive)

        Returns:
            List of all values for this header (empty list if not found)
        """
        name_lower = name.lower()
        if name_lower in self._headers:
            return [value for _, value in self._headers[name_lower]]
        return []

    def set(self, name: str, value: str) -> None:
        """
        Set a header to a single value, replacing any existing values.

        Args:
            name: Header name (case-insensitive)
            value: Header value
        """
        self._headers[name.lower()] = [(name, value)]

    def __setitem__(self, name: str, value: str) -> None:
        self.set(name, value)

    def __getitem__(self, name: str) -> str:
        if not isinstance(name, str):
            raise KeyError(name)

        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name.lower() in self._headers

    def __iter__(self):
        """Iterate over header names (using original casing of first occurrence)."""
        for values in self._headers.values():
            if values:
                yield values[0][0]

    def keys(self):
        return list(self)

    def items(self):
        """Return (name, first_value) pairs."""
        return [(values[0][0], values[0][1]) for values in self._headers.values() if values]

    def items_all(self):
        """
        Return all (name, value) pairs including duplicates.

        Useful for serialization to formats that support multiple headers.
        """
        result = []
        for values in self._headers.values():
            result.extend(values)
        return result

    def to_dict(self) -> Dict[str, str]:
        """Convert to a simple dict with the first value for each header."""
        return {values[0][0]: values[0][1] for values in self._headers.values() if values}

    def __repr__(self):
        return f"MultiValueHeaders({self.items_all()!r})"

    def __len__(self):
        """Return number of distinct header names."""
        return len(self._headers)

    def __eq__(self, other):
        if isinstance(other, MultiValueHeaders):
            return self._headers == other._headers
        return NotImplemented

    def copy(self):
        return MultiValueHeaders(self)


@dataclass
class Request:
    """Represents the parts of an HTTP request the analyzer reads.

    The method is kept as the raw string because CORS compares method names
    case-sensitively (``OPTIONS`` starts a preflight, ``options`` does not).
    """

    method: str
    headers: Union[Dict[str, Any], List[Tuple[str, str]], MultiValueHeaders] = field(default_factory=dict)

    def __post_init__(self):
        """Ensure headers is a MultiValueHeaders for case-insensitive header lookups."""
        if not isinstance(self.headers, MultiValueHeaders):
            self.headers = MultiValueHeaders(self.headers)


class AnalysisType(Enum):
    """Classification of a request against the CORS resource processing model."""

    OUT_OF_CORS_SCOPE = "out_of_cors_scope"
    NOT_CORS = "out_of_cors_scope"
    PRE_FLIGHT_REQUEST = "pre_flight_request"
    ACTUAL_REQUEST = "actual_request"
    BAD_REQUEST = "bad_request"


def _freeze_value(value: Any) -> HeaderValue:
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return value


def render_header_value(value: HeaderValue) -> str:
    """Render a header value for the wire: lists are comma-joined, ints in decimal."""
    if isinstance(value, (list, tuple)):
        return ", ".join(value)
    return str(value)


@dataclass(frozen=True)
class AnalysisResult:
    """Immutable outcome of analyzing a request.

    Attributes:
        type: Request classification
        headers: Read-only mapping of response header name to value. Insertion
                 order is the order the analyzer added them. Multi-valued headers
                 (allowed methods, allowed/exposed headers) are tuples of strings;
                 Access-Control-Max-Age is an int.
    """

    type: AnalysisType
    headers: Mapping[str, HeaderValue] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {name: _freeze_value(value) for name, value in dict(self.headers).items()}
        object.__setattr__(self, "headers", MappingProxyType(frozen))

    @property
    def is_pre_flight(self) -> bool:
        return self.type is AnalysisType.PRE_FLIGHT_REQUEST

    @property
    def is_actual(self) -> bool:
        return self.type is AnalysisType.ACTUAL_REQUEST

    @property
    def is_bad_request(self) -> bool:
        return self.type is AnalysisType.BAD_REQUEST

    @property
    def is_out_of_cors_scope(self) -> bool:
        return self.type is AnalysisType.OUT_OF_CORS_SCOPE

    def to_response_headers(self) -> MultiValueHeaders:
        """Serialize the header set into response headers."""
        return MultiValueHeaders(
            [(name, render_header_value(value)) for name, value in self.headers.items()]
        )

    def apply_to(self, headers: MutableMapping[str, str]) -> None:
        """Write the serialized header set into an existing response header mapping."""
        for name, value in self.headers.items():
            headers[name] = render_header_value(value)

    def __eq__(self, other):
        if isinstance(other, AnalysisResult):
            return self.type is other.type and dict(self.headers) == dict(other.headers)
        return NotImplemented

    def __hash__(self):
        return hash((self.type, tuple(self.headers.items())))
