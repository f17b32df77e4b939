"""
Assistant entry point.

Serves the chat API over HTTP, or runs the offline console demo for
development.

Usage:
    HTTP server:  python main.py serve
    Console mode: python main.py console
"""

import logging
import sys

from ts_assistant.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the FastAPI app under uvicorn on the configured host and port."""
    import uvicorn

    from ts_assistant.api.http_api import create_app

    app = create_app(config=settings)
    logger.info(
        "Starting %s on %s:%d", settings.business.assistant_name,
        settings.server.host, settings.server.port,
    )
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


def _run_console_mode() -> None:
    """Start the offline console demo (no API keys required)."""
    from console_demo import main as console_main

    sys.argv = [sys.argv[0], *sys.argv[2:]]
    console_main()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server()
