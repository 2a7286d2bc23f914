"""FastAPI application entry point for the Paperless note linker API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
from server.api.routers.NoteRouter import note_router
from server.api.routers.DocumentRouter import document_router
from server.api.routers.CacheRouter import cache_router
from services.note_link.ListingCache import ListingCache
from shared.clients.dms.paperless.DMSClientPaperless import DMSClientPaperless
from shared.errors import ConfigurationError, TransportError
from shared.helper.HelperConfig import HelperConfig
from shared.host.LocalFileStore import LocalFileStore
from shared.host.LoggingNotifier import LoggingNotifier
from shared.logging.logging_setup import setup_logging
from shared.models.settings import LinkerSettings

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


def create_app(transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Create the API application.

    Args:
        transport: Optional httpx transport for the Paperless client, e.g. a mock in tests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application startup and shutdown."""
        app.state.logging = logging
        app.state.helper_config = HelperConfig(logger=logging)
        app.state.settings = LinkerSettings.from_config(app.state.helper_config)

        paperless_client = DMSClientPaperless(helper_config=app.state.helper_config)
        await paperless_client.boot(transport=transport)
        app.state.dms_client = paperless_client

        vault_root = app.state.helper_config.get_string_val("LINKER_VAULT_ROOT", default=os.getcwd())
        app.state.file_store = LocalFileStore(vault_root)
        app.state.listing_cache = ListingCache(
            helper_config=app.state.helper_config,
            dms_client=paperless_client,
            notifier=LoggingNotifier(helper_config=app.state.helper_config),
        )

        logging.info("Note linker API ready, vault root %s.", vault_root, color="green")
        yield

        await paperless_client.close()
        logging.info("Note linker API shut down.")

    app = FastAPI(
        title="Paperless Note Linker",
        description="Links notes to Paperless-ngx documents via durable share links.",
        version=app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TransportError)
    async def handle_transport_error(request: Request, exc: TransportError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "upstream_status": exc.status_code},
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.include_router(note_router)
    app.include_router(document_router)
    app.include_router(cache_router)
    return app


app = create_app()


# Server Start
if __name__ == "__main__":
    import uvicorn
    logging.info(f"Starting note linker API v{app_version} on port 8000...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
