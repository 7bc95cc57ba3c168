"""Run the API with uvicorn: ``python -m book_api``."""

import uvicorn

from book_api.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "book_api.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
