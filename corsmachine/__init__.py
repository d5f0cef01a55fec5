"""
A CORS request analyzer following the W3C resource processing model.

The analyzer classifies each request (not CORS, bad request, actual CORS
request or pre-flight) and computes the response headers that permit it,
consulting a pluggable policy for every allow/deny decision. Network I/O and
server integration are left to the host application.
"""

from .analyzer import Analyzer
from .exceptions import ConfigurationError, CorsError, OriginParseError
from .factory import Factory, create_analyzer
from .models import AnalysisResult, AnalysisType, MultiValueHeaders, Request
from .settings import Settings, SettingsModel
from .strategy import AnalysisStrategy
from .urls import ParsedUrl, parse_url

__version__ = "0.1.0"
__author__ = "corsmachine Contributors"
__license__ = "MIT"

__all__ = [
    "Analyzer",
    "AnalysisResult",
    "AnalysisStrategy",
    "AnalysisType",
    "ConfigurationError",
    "CorsError",
    "Factory",
    "MultiValueHeaders",
    "OriginParseError",
    "ParsedUrl",
    "Request",
    "Settings",
    "SettingsModel",
    "create_analyzer",
    "parse_url",
]
