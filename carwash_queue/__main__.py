"""Run the car wash queue API with uvicorn.

Host and port come from settings (``HOST``/``PORT``, default ``0.0.0.0:3000``).

Usage:
    python -m carwash_queue
"""

import uvicorn

from carwash_queue.core.setting import settings


def main() -> None:
    uvicorn.run(
        "carwash_queue.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
