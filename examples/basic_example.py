#!/usr/bin/env python3
"""
Example showing how a server classifies requests with corsmachine.

Run it to see the decision for a few typical browser requests. DEBUG logging
shows why each request was classified the way it was.
"""

import logging

from corsmachine import AnalysisType, Request, Settings, create_analyzer


def setup_logging():
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_cors_analyzer():
    settings = Settings(
        server_origin="https://api.example.com",
        allowed_origins=["https://app.example.com"],
        allowed_methods=["GET", "POST", "PUT", "DELETE"],
        allowed_headers=["Content-Type", "Authorization", "X-Custom"],
        exposed_headers=["X-Request-ID"],
        credentials=True,
        max_age=600,
    )
    return create_analyzer(settings)


def status_for(result):
    """Map a classification to the status a server would send."""
    if result.type is AnalysisType.BAD_REQUEST:
        return 400
    if result.type is AnalysisType.PRE_FLIGHT_REQUEST:
        return 204
    return 200


def main():
    setup_logging()
    analyzer = create_cors_analyzer()

    requests = {
        "same-origin GET": Request("GET", {"Host": "api.example.com"}),
        "cross-origin GET": Request("GET", {
            "Host": "api.example.com",
            "Origin": "https://app.example.com",
        }),
        "preflight PUT": Request("OPTIONS", {
            "Host": "api.example.com",
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "X-Custom, Content-Type",
        }),
        "preflight PATCH (refused)": Request("OPTIONS", {
            "Host": "api.example.com",
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "PATCH",
        }),
        "wrong Host": Request("GET", {
            "Host": "internal.example.com",
            "Origin": "https://app.example.com",
        }),
    }

    for name, request in requests.items():
        result = analyzer.analyze(request)
        print(f"\n{name}: {result.type.name} -> {status_for(result)}")
        for header, value in result.to_response_headers().items_all():
            print(f"  {header}: {value}")


if __name__ == "__main__":
    main()
