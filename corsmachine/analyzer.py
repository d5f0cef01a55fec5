"""
CORS request analyzer.

Implements the W3C CORS resource processing model as a short decision chain,
in the same spirit as a webmachine flow: each step either terminates with an
AnalysisResult or hands over to the next one.

    host valid? --no--> BAD_REQUEST
        |
    origin present, cross-origin and allowed? --no--> OUT_OF_CORS_SCOPE
        |
    OPTIONS? --no--> actual request (6.1.3 - 6.1.4)   --> ACTUAL_REQUEST
        |
    pre-flight (6.2.3 - 6.2.10)                       --> PRE_FLIGHT_REQUEST

See http://www.w3.org/TR/cors/#resource-processing-model
"""

import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from . import constants
from .exceptions import OriginParseError
from .models import AnalysisResult, AnalysisType, HeaderValue
from .urls import ParsedUrl

if TYPE_CHECKING:
    from .factory import Factory
    from .strategy import AnalysisStrategy


class Analyzer:
    """Classifies requests and computes CORS response headers.

    The analyzer holds no per-request state, so one instance can serve
    concurrent requests as long as the strategy is safe for concurrent reads.
    """

    def __init__(self, strategy: "AnalysisStrategy", factory: "Factory",
                 logger: Optional[logging.Logger] = None):
        self._strategy = strategy
        self._factory = factory
        self._logger = logger or logging.getLogger(__name__)

    @property
    def strategy(self) -> "AnalysisStrategy":
        return self._strategy

    def analyze(self, request) -> AnalysisResult:
        """Analyze a request.

        Args:
            request: Object with a ``method`` string and ``headers`` offering
                     case-insensitive ``get_all(name)``, e.g. ``corsmachine.Request``

        Returns:
            AnalysisResult with the classification and response headers

        Raises:
            OriginParseError: Only if the strategy's server origin is malformed
        """
        server_origin = self._factory.create_parsed_url(self._strategy.get_server_origin())

        # Check of Host header is strongly encouraged by 6.3
        if not self._is_same_host(request, server_origin):
            return self._create_result(AnalysisType.BAD_REQUEST)

        # Header 'Origin' might be omitted for same-origin requests (6.1.1, 6.2.1)
        request_origin = self._get_origin(request)
        if request_origin is None:
            self._logger.debug("Request is out of CORS scope (no usable Origin header)")
            return self._create_result(AnalysisType.OUT_OF_CORS_SCOPE)

        if request_origin.is_same_origin(server_origin):
            self._logger.debug(f"Request is out of CORS scope (same origin {request_origin.origin})")
            return self._create_result(AnalysisType.OUT_OF_CORS_SCOPE)

        # 6.1.2, 6.2.2
        if not self._strategy.is_request_origin_allowed(request_origin):
            self._logger.debug(f"Request is out of CORS scope (origin {request_origin.origin} is not allowed)")
            return self._create_result(AnalysisType.OUT_OF_CORS_SCOPE)

        if request.method == constants.PRE_FLIGHT_METHOD:
            return self._analyze_as_pre_flight(request, request_origin)
        return self._analyze_as_request(request, request_origin)

    def _analyze_as_request(self, request, request_origin: ParsedUrl) -> AnalysisResult:
        """Simple and actual CORS request (6.1.3 - 6.1.4)."""
        headers: Dict[str, HeaderValue] = {}

        # 6.1.3
        self._add_origin_and_credentials(headers, request, request_origin)

        # 6.1.4
        exposed_headers = self._strategy.get_response_exposed_headers(request)
        if exposed_headers:
            headers[constants.EXPOSE_HEADERS] = list(exposed_headers)

        self._logger.debug(f"Actual CORS request from {request_origin.origin}")
        return self._create_result(AnalysisType.ACTUAL_REQUEST, headers)

    def _analyze_as_pre_flight(self, request, request_origin: ParsedUrl) -> AnalysisResult:
        """Pre-flight request (6.2.3 - 6.2.10)."""
        # 6.2.3
        request_method = self._get_first_header(request, constants.REQUEST_METHOD)
        if request_method is None:
            self._logger.debug(
                f"Request is out of CORS scope (OPTIONS without {constants.REQUEST_METHOD})"
            )
            return self._create_result(AnalysisType.OUT_OF_CORS_SCOPE)

        # 6.2.4
        request_headers = self._get_request_headers(request)

        # 6.2.5, 6.2.6
        if not self._strategy.is_request_method_supported(request_method):
            self._logger.debug(f"Pre-flight rejected (method {request_method!r} is not allowed)")
            return self._create_result(AnalysisType.PRE_FLIGHT_REQUEST)
        if not self._strategy.is_request_all_headers_supported(request_headers):
            self._logger.debug(f"Pre-flight rejected (headers {request_headers!r} are not all allowed)")
            return self._create_result(AnalysisType.PRE_FLIGHT_REQUEST)

        headers: Dict[str, HeaderValue] = {}

        # 6.2.7
        self._add_origin_and_credentials(headers, request, request_origin)

        # 6.2.8
        if self._strategy.is_pre_flight_can_be_cached(request):
            headers[constants.MAX_AGE] = self._strategy.get_pre_flight_cache_max_age(request)

        # 6.2.9
        if (request_method not in constants.SIMPLE_METHODS
                or self._strategy.is_force_add_allowed_methods_to_pre_flight_response()):
            headers[constants.ALLOW_METHODS] = list(
                self._strategy.get_request_allowed_methods(request, request_method)
            )

        # 6.2.10
        if (self._has_non_simple_headers(request_headers)
                or self._strategy.is_force_add_allowed_headers_to_pre_flight_response()):
            headers[constants.ALLOW_HEADERS] = list(
                self._strategy.get_request_allowed_headers(request, request_headers)
            )

        self._logger.debug(f"Pre-flight allowed for {request_origin.origin} ({request_method})")
        return self._create_result(AnalysisType.PRE_FLIGHT_REQUEST, headers)

    def _add_origin_and_credentials(self, headers: Dict[str, HeaderValue], request,
                                    request_origin: ParsedUrl) -> None:
        headers[constants.ALLOW_ORIGIN] = request_origin.origin
        if self._strategy.is_request_credentials_supported(request):
            headers[constants.ALLOW_CREDENTIALS] = constants.ALLOW_CREDENTIALS_TRUE

    def _is_same_host(self, request, server_origin: ParsedUrl) -> bool:
        # Header 'Host' must be present (RFC 2616 14.23) and has no scheme
        host_value = self._get_first_header(request, constants.HOST)
        if host_value is None:
            self._logger.debug("Bad request (no Host header)")
            return False

        try:
            host_url = self._factory.create_parsed_url(host_value)
        except OriginParseError as e:
            self._logger.info(f"Bad request (unparseable Host header): {e}")
            return False

        if not (server_origin.is_host_equal(host_url) and server_origin.is_port_equal(host_url)):
            self._logger.debug(f"Bad request (Host {host_value!r} does not match {server_origin.origin})")
            return False
        return True

    def _get_origin(self, request) -> Optional[ParsedUrl]:
        origin_value = self._get_first_header(request, constants.ORIGIN)
        if origin_value is None:
            return None
        try:
            return self._factory.create_parsed_url(origin_value)
        except OriginParseError as e:
            self._logger.info(f"Ignoring unparseable Origin header: {e}")
            return None

    def _get_request_headers(self, request) -> List[str]:
        value = self._get_first_header(request, constants.REQUEST_HEADERS)
        if value is None:
            return []
        # Browsers may put whitespace around the commas
        names = (name.strip() for name in value.split(constants.REQUEST_HEADERS_SEPARATOR))
        return [name for name in names if name]

    @staticmethod
    def _has_non_simple_headers(request_headers: List[str]) -> bool:
        # Header names are case-insensitive, so the simple set is matched lower-cased
        return any(
            name.lower() not in constants.SIMPLE_HEADERS_EXCL_CONTENT_TYPE
            for name in request_headers
        )

    @staticmethod
    def _get_first_header(request, name: str) -> Optional[str]:
        values = request.headers.get_all(name)
        return values[0] if values else None

    def _create_result(self, analysis_type: AnalysisType,
                       headers: Optional[Dict[str, HeaderValue]] = None) -> AnalysisResult:
        return self._factory.create_analysis_result(analysis_type, headers or {})
