"""
Test framework for CORS analysis testing using 4-layer architecture.
"""

from .dsl import CorsAnalysisDsl, CorsRequest, CorsOutcome
from .drivers import DirectDriver, WireDriver
from .multi_driver_base import MultiDriverTestBase
from .strategies import StubStrategy

__all__ = [
    'CorsAnalysisDsl',
    'CorsRequest',
    'CorsOutcome',
    'DirectDriver',
    'WireDriver',
    'MultiDriverTestBase',
    'StubStrategy',
]
