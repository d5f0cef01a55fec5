"""
Object construction for the analyzer and its collaborators.
"""

import logging
from typing import Mapping, Optional, Union, TYPE_CHECKING

from .models import AnalysisResult, AnalysisType, HeaderValue
from .urls import ParsedUrl, parse_url

if TYPE_CHECKING:
    from .analyzer import Analyzer
    from .strategy import AnalysisStrategy


class Factory:
    """Builds parsed URLs, analysis results and analyzers.

    Subclass to substitute any of these, e.g. a URL parser with IDNA support
    or a result type carrying extra diagnostics.
    """

    def create_parsed_url(self, value: Union[str, ParsedUrl]) -> ParsedUrl:
        """Parse a header or configuration value into an origin.

        Raises:
            OriginParseError: If the value cannot be parsed
        """
        return parse_url(value)

    def create_analysis_result(self, analysis_type: AnalysisType,
                               headers: Mapping[str, HeaderValue]) -> AnalysisResult:
        return AnalysisResult(type=analysis_type, headers=headers)

    def create_analyzer(self, strategy: "AnalysisStrategy",
                        logger: Optional[logging.Logger] = None) -> "Analyzer":
        from .analyzer import Analyzer
        return Analyzer(strategy, self, logger=logger)


def create_analyzer(strategy: "AnalysisStrategy", factory: Optional[Factory] = None,
                    logger: Optional[logging.Logger] = None) -> "Analyzer":
    """Create an analyzer with the default wiring.

    Args:
        strategy: Policy to consult
        factory: Factory for URLs and results; a new Factory when omitted
        logger: Logger for decision tracing; the module logger when omitted

    Example::

        analyzer = create_analyzer(Settings(
            server_origin="https://api.example.com",
            allowed_origins=["https://app.example.com"],
        ))
        result = analyzer.analyze(request)
    """
    if factory is None:
        factory = Factory()
    return factory.create_analyzer(strategy, logger=logger)
