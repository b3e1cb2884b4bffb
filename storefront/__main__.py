"""
Run the API server:

    python -m storefront
"""

import uvicorn

from storefront.config import Settings
from storefront.http import create_app


def main() -> None:
    settings = Settings.load()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
