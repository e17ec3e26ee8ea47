import uvicorn

from geocache.config import settings


if __name__ == "__main__":
    uvicorn.run(
        "geocache.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "dev",
    )
