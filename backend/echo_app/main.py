import logging

from fastapi import FastAPI
from .api.routes import api_router
from .core.config import ECHO_PORT, settings
from .core.logging import configure_logging
import uvicorn

logger = logging.getLogger(__name__)


class EchoServer(uvicorn.Server):
    """uvicorn server that announces the port once its sockets are bound."""

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            logger.info("listening on :%d", self.config.port)


def create_app() -> FastAPI:
    # Every way of serving the app (run(), `uvicorn echo_app.main:app`) must print requests.
    configure_logging(settings.LOG_LEVEL)

    # Docs routes are disabled so /docs, /redoc and /openapi.json are echoed like any other path.
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        description="Reflects every HTTP request back as JSON",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.include_router(api_router)
    return application


app = create_app()


def run() -> None:
    config = uvicorn.Config(app, port=ECHO_PORT, host=settings.HOST, log_level=settings.LOG_LEVEL.lower())
    EchoServer(config).run()


if __name__ == "__main__":
    run()
