"""Rental Admin: entry point.

Port selection:
  1. PORT env var (explicit override)
  2. Default port 4321, the port the dashboard front end expects
"""

from __future__ import annotations

import logging
import os

import uvicorn

from rental_admin.main import create_app

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4321


def main() -> None:
    host = os.environ.get("HOST", DEFAULT_HOST)
    port = int(os.environ.get("PORT", DEFAULT_PORT))
    logger.info("Starting Rental Admin on %s:%d", host, port)
    uvicorn.run(
        create_app(),
        host=host,
        port=port,
        log_level="info",
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
