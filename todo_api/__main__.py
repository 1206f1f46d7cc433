import uvicorn

from todo_api.config import load_settings


def run() -> None:
    settings = load_settings()
    uvicorn.run(
        "todo_api.main:app",
        host=settings.host,
        port=settings.bind_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
