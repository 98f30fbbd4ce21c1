import uvicorn

from commentstore.config import get_settings


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "commentstore.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
