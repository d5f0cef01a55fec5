"""
Custom exceptions for the CORS analyzer.
"""
from typing import Any, Dict, List, Optional


class CorsError(Exception):
    """Base exception for CORS analysis errors."""

    pass


class OriginParseError(CorsError, ValueError):
    """Raised when an Origin, Host or server origin value cannot be parsed."""

    def __init__(self, value: Any, reason: str = "malformed origin"):
        self.value = value
        self.reason = reason
        super().__init__(f"Cannot parse {value!r}: {reason}")


class ConfigurationError(CorsError, ValueError):
    """Raised when CORS settings are invalid."""

    def __init__(self, message="Invalid CORS configuration", errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self.message)
