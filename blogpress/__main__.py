"""Run the API with uvicorn: ``python -m blogpress`` or ``blogpress-api``."""

import uvicorn

from blogpress.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "blogpress.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
