"""authgate entrypoint.

Run with:
  python -m authgate
"""

import logging

import uvicorn

from authgate import settings


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("authgate").setLevel(settings.LOG_LEVEL)


def main() -> None:
    configure_logging()
    # uvicorn stops accepting connections on SIGINT/SIGTERM and drains in-flight requests.
    uvicorn.run(
        "authgate.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_config=None,
    )


if __name__ == "__main__":
    main()
