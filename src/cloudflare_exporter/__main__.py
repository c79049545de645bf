# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Command-line entry point: ``python -m cloudflare_exporter``."""

import logging
import sys

import uvicorn

from .config import ExporterConfig
from .exceptions import AuthenticationError, ConfigurationError
from .server import build_runtime, create_app

logger = logging.getLogger("cloudflare_exporter")

EXIT_CONFIG_ERROR = 1
EXIT_AUTH_ERROR = 2


def main() -> int:
    try:
        config = ExporterConfig.from_env()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        runtime = build_runtime(config)
    except AuthenticationError as e:
        logger.error(f"Cannot start exporter: {e}")
        return EXIT_AUTH_ERROR

    uvicorn.run(
        create_app(runtime),
        host=config.listen_host,
        port=config.listen_port,
        log_level=config.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
