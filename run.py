#!/usr/bin/env python3
"""
AYA Token Ledger Entry Point

Starts the FastAPI server with the token deployed (or reopened) from
configuration.
"""

import sys

import uvicorn

from aya_token.config import get_config
from aya_token.logging_config import setup_logging


def run_server(host: str, port: int, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "aya_token.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, "aya", config.log_format)
    logger.info(f"Starting AYA token API on {config.api_host}:{config.api_port} "
                f"(storage: {config.storage_backend})")

    try:
        run_server(host=config.api_host, port=config.api_port)
    except KeyboardInterrupt:
        logger.info("Shutting down AYA token API")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)
