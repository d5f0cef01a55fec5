"""
Header names and fixed method/header sets from the W3C CORS recommendation.

See http://www.w3.org/TR/cors/#syntax and
http://www.w3.org/TR/cors/#simple-method
"""

# Request headers consulted by the analyzer
HOST = "Host"
ORIGIN = "Origin"
REQUEST_METHOD = "Access-Control-Request-Method"
REQUEST_HEADERS = "Access-Control-Request-Headers"
REQUEST_HEADERS_SEPARATOR = ","

# Response headers produced by the analyzer
ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
MAX_AGE = "Access-Control-Max-Age"

ALLOW_CREDENTIALS_TRUE = "true"

PRE_FLIGHT_METHOD = "OPTIONS"

# Method names are case-sensitive, so these are matched exactly
SIMPLE_METHODS = frozenset(["GET", "HEAD", "POST"])

# Simple headers excluding Content-Type, stored lower-cased for lookups
SIMPLE_HEADERS_EXCL_CONTENT_TYPE = frozenset([
    "accept",
    "accept-language",
    "content-language",
])

# Opaque origin serialization (sandboxed iframes, file:// pages, redirects)
NULL_ORIGIN = "null"

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}
