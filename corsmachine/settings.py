"""Configuration-driven CORS policy.

``Settings`` is the stock ``AnalysisStrategy``: allow-lists for origins, methods
and headers plus the credential, caching and advertisement switches. It can be
built directly, from a plain mapping, or from ``CORS_*`` environment variables.

References:
- W3C CORS: http://www.w3.org/TR/cors/#resource-processing-model
- MDN CORS: https://developer.mozilla.org/en-US/docs/Web/HTTP/CORS
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .exceptions import ConfigurationError, OriginParseError
from .strategy import AnalysisStrategy
from .urls import ParsedUrl, parse_url

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass
class Settings(AnalysisStrategy):
    """CORS policy configuration.

    Attributes:
        server_origin: Origin this server answers on, e.g. "https://api.example.com".
                       Requests whose Host header does not match it are rejected.

        allowed_origins: List of allowed origins or "*" for all origins.
                         Entries are compared as origins, so "https://app.example.com"
                         also matches "https://APP.example.com:443". List "null"
                         to allow opaque origins.

        allowed_methods: Methods a preflight may ask for (case-sensitive).

        allowed_headers: Request headers a preflight may ask for (case-insensitive).
                         Use ["*"] to allow all headers.

        exposed_headers: Response headers that JavaScript can access.

        credentials: Whether to allow credentials (cookies, authorization headers).
                     When True, allowed_origins cannot be "*" unless
                     reflect_any_origin is enabled.

        max_age: How long (seconds) a browser can cache the preflight response.
                 None disables Access-Control-Max-Age.

        force_add_methods: Always send Access-Control-Allow-Methods on preflight,
                           even for simple methods.

        force_add_headers: Always send Access-Control-Allow-Headers on preflight,
                           even when only simple headers were requested.

        reflect_any_origin: Allow "*" together with credentials. The analyzer
                            echoes the request origin, so this admits credentialed
                            requests from anywhere.
                            WARNING: Only use in development!

    Examples:
        # Single front-end
        Settings(
            server_origin="https://api.example.com",
            allowed_origins=["https://app.example.com"],
        )

        # Credentials and exposed headers
        Settings(
            server_origin="https://api.example.com",
            allowed_origins=["https://app.example.com"],
            credentials=True,
            exposed_headers=["X-Request-ID"],
        )
    """

    server_origin: Union[str, ParsedUrl]

    allowed_origins: Union[List[str], Literal["*"]] = field(default_factory=list)

    allowed_methods: List[str] = field(default_factory=lambda: [
        "GET",
        "HEAD",
        "POST",
        "PUT",
        "PATCH",
        "DELETE",
    ])

    # Allow common headers browsers send
    allowed_headers: List[str] = field(default_factory=lambda: [
        "Accept",
        "Accept-Language",
        "Content-Type",
        "Content-Language",
        "Authorization",
        "X-Requested-With",
    ])

    exposed_headers: List[str] = field(default_factory=list)

    credentials: bool = False

    # 24 hours in seconds
    max_age: Optional[int] = 86400

    force_add_methods: bool = False

    force_add_headers: bool = False

    reflect_any_origin: bool = False

    def __post_init__(self):
        self.validate()

    @property
    def allows_any_origin(self) -> bool:
        return self.allowed_origins == WILDCARD or WILDCARD in self.allowed_origins

    @property
    def allows_any_header(self) -> bool:
        return WILDCARD in self.allowed_headers

    def validate(self) -> None:
        """Validate the configuration.

        Called on construction; call it again after changing fields.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            server_origin = parse_url(self.server_origin)
        except OriginParseError as e:
            raise ConfigurationError(f"CORS: invalid server origin {self.server_origin!r}: {e.reason}") from e
        if server_origin.is_opaque or server_origin.scheme is None:
            raise ConfigurationError(
                f"CORS: server origin {self.server_origin!r} must include a scheme and host"
            )

        if isinstance(self.allowed_origins, str) and self.allowed_origins != WILDCARD:
            raise ConfigurationError(
                f"CORS: allowed_origins must be a list of origins or '*', "
                f"got the string {self.allowed_origins!r}"
            )
        if not self.allows_any_origin:
            for origin in self.allowed_origins:
                try:
                    parse_url(origin)
                except OriginParseError as e:
                    raise ConfigurationError(f"CORS: invalid allowed origin {origin!r}: {e.reason}") from e

        if self.max_age is not None and self.max_age < 0:
            raise ConfigurationError("CORS: max_age must not be negative")

        # Security: Cannot use wildcard origin with credentials
        # UNLESS reflect_any_origin is explicitly enabled
        if self.credentials and self.allows_any_origin and not self.reflect_any_origin:
            raise ConfigurationError(
                "CORS: Cannot use wildcard origin '*' with credentials=True. "
                "Specify explicit origins when allowing credentials, or set "
                "reflect_any_origin=True for development environments."
            )
        if self.credentials and self.allows_any_origin:
            logger.warning("CORS: reflecting any origin with credentials enabled")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a plain mapping (parsed JSON, YAML, etc.).

        List fields also accept comma-separated strings.

        Raises:
            ConfigurationError: If the mapping does not validate; ``errors``
                carries the pydantic error details
        """
        try:
            model = SettingsModel.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid CORS configuration", errors=e.errors(include_url=False)
            ) from e
        return cls(**model.model_dump(exclude_unset=True))

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None, prefix: str = "CORS_") -> "Settings":
        """Build settings from environment variables.

        Each field maps to ``{prefix}{FIELD_NAME}``, e.g. ``CORS_ALLOWED_ORIGINS``.
        Unset variables keep the defaults.
        """
        if environ is None:
            environ = os.environ
        data = {}
        for name in SettingsModel.model_fields:
            key = f"{prefix}{name.upper()}"
            if key in environ:
                data[name] = environ[key]
        logger.debug(f"Loading CORS settings from environment: {sorted(data)}")
        return cls.from_mapping(data)

    # AnalysisStrategy

    def get_server_origin(self) -> ParsedUrl:
        return parse_url(self.server_origin)

    def is_request_origin_allowed(self, request_origin: ParsedUrl) -> bool:
        if self.allows_any_origin:
            return True
        key = request_origin.key()
        return any(parse_url(origin).key() == key for origin in self.allowed_origins)

    def is_request_credentials_supported(self, request) -> bool:
        return self.credentials

    def get_response_exposed_headers(self, request) -> List[str]:
        return list(self.exposed_headers)

    def is_request_method_supported(self, method: str) -> bool:
        return method in self.allowed_methods

    def is_request_all_headers_supported(self, headers: List[str]) -> bool:
        if self.allows_any_header:
            return True
        allowed = {name.lower() for name in self.allowed_headers}
        return all(header.lower() in allowed for header in headers)

    def is_pre_flight_can_be_cached(self, request) -> bool:
        return self.max_age is not None

    def get_pre_flight_cache_max_age(self, request) -> int:
        return self.max_age or 0

    def get_request_allowed_methods(self, request, request_method: str) -> List[str]:
        return list(self.allowed_methods)

    def get_request_allowed_headers(self, request, request_headers: List[str]) -> List[str]:
        # Echo what was asked for; browsers only check the requested names are present
        if request_headers:
            return list(request_headers)
        return [header for header in self.allowed_headers if header != WILDCARD]

    def is_force_add_allowed_methods_to_pre_flight_response(self) -> bool:
        return self.force_add_methods

    def is_force_add_allowed_headers_to_pre_flight_response(self) -> bool:
        return self.force_add_headers


class SettingsModel(BaseModel):
    """Validation model for settings loaded from mappings or the environment."""

    model_config = ConfigDict(extra="forbid")

    server_origin: str = Field(
        ...,
        description="Origin this server answers on, e.g. https://api.example.com"
    )

    allowed_origins: Union[Literal["*"], List[str]] = Field(
        default_factory=list,
        description='Allowed origins, or "*" for any origin'
    )

    allowed_methods: List[str] = Field(
        default_factory=list,
        description="Methods a preflight may request"
    )

    allowed_headers: List[str] = Field(
        default_factory=list,
        description="Headers a preflight may request"
    )

    exposed_headers: List[str] = Field(
        default_factory=list,
        description="Response headers exposed to scripts"
    )

    credentials: bool = False

    max_age: Optional[int] = Field(
        None,
        ge=0,
        description="Preflight cache lifetime in seconds; null disables caching"
    )

    force_add_methods: bool = False

    force_add_headers: bool = False

    reflect_any_origin: bool = False

    @field_validator(
        "allowed_origins", "allowed_methods", "allowed_headers", "exposed_headers", mode="before"
    )
    @classmethod
    def split_comma_separated(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            if info.field_name == "allowed_origins" and value.strip() == WILDCARD:
                return WILDCARD
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("max_age", mode="before")
    @classmethod
    def blank_max_age(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in ("", "none", "null"):
            return None
        return value
