import uvicorn

from reva.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "reva.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level,
        reload=settings.is_development,
    )
