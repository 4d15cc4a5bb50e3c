#!/usr/bin/env python3
"""
Command-line entry point for the mock service.
"""

import argparse
import sys

from shared.config import get_settings
from shared.errors import ConfigurationError
from shared.logging import configure_logging, get_logger

from .main import MockService


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve pre-recorded HTTP responses from a rule document")
    parser.add_argument("--config", dest="config_path", help="Path to the XML rule document")
    parser.add_argument("--resource-root", dest="resource_root", help="Directory resource locations are resolved against")
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--log-level", dest="log_level", choices=["debug", "info", "warning", "error"])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings(**vars(args))

    try:
        service = MockService(settings)
    except ConfigurationError as e:
        configure_logging("mock", settings.log_level)
        get_logger("mock.bootstrap").error("Startup aborted", code=e.code, message=e.message, details=e.details)
        return 1

    service.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
