"""Run the service with uvicorn: ``python -m ratelimiter``."""

import uvicorn

from ratelimiter.core.config import settings


def main() -> None:
    uvicorn.run(
        "ratelimiter.main:app",
        host=settings.server.host,
        port=settings.server.port,
    )


if __name__ == "__main__":
    main()
