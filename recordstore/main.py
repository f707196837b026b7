import uvicorn

from recordstore.core.app_factory import create_app
from recordstore.core.config import settings

app = create_app(settings)


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
