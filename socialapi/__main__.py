import uvicorn

from socialapi.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "socialapi.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
