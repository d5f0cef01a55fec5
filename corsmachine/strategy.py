"""
Policy interface consulted by the analyzer.

The analyzer decides *which* CORS rule applies; the strategy answers what is
allowed. Implementations are shared between requests and must therefore be
safe for concurrent reads.
"""

from abc import ABC, abstractmethod
from typing import List, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .urls import ParsedUrl


class AnalysisStrategy(ABC):
    """Answers the allow/deny and value questions of the CORS algorithm."""

    @abstractmethod
    def get_server_origin(self) -> Union[str, "ParsedUrl"]:
        """Origin of this server, e.g. ``https://api.example.com:443``."""

    @abstractmethod
    def is_request_origin_allowed(self, request_origin: "ParsedUrl") -> bool:
        """Whether requests from this origin may access the resource."""

    @abstractmethod
    def is_request_credentials_supported(self, request) -> bool:
        """Whether to send Access-Control-Allow-Credentials: true."""

    @abstractmethod
    def get_response_exposed_headers(self, request) -> List[str]:
        """Response headers exposed to scripts; empty list for none."""

    @abstractmethod
    def is_request_method_supported(self, method: str) -> bool:
        """Whether the method named in Access-Control-Request-Method is allowed."""

    @abstractmethod
    def is_request_all_headers_supported(self, headers: List[str]) -> bool:
        """Whether every header named in Access-Control-Request-Headers is allowed.

        The analyzer passes trimmed names as sent by the client. Case sensitivity
        of the comparison is up to the implementation.
        """

    @abstractmethod
    def is_pre_flight_can_be_cached(self, request) -> bool:
        """Whether to send Access-Control-Max-Age with a preflight response."""

    @abstractmethod
    def get_pre_flight_cache_max_age(self, request) -> int:
        """Preflight cache lifetime in seconds."""

    @abstractmethod
    def get_request_allowed_methods(self, request, request_method: str) -> List[str]:
        """Value of Access-Control-Allow-Methods."""

    @abstractmethod
    def get_request_allowed_headers(self, request, request_headers: List[str]) -> List[str]:
        """Value of Access-Control-Allow-Headers."""

    @abstractmethod
    def is_force_add_allowed_methods_to_pre_flight_response(self) -> bool:
        """Send Access-Control-Allow-Methods even when only a simple method was requested."""

    @abstractmethod
    def is_force_add_allowed_headers_to_pre_flight_response(self) -> bool:
        """Send Access-Control-Allow-Headers even when only simple headers were requested."""
