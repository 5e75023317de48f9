"""Lineage Desk daemon — FastAPI app serving the catalog API and UI."""

import logging
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI

from lineagedesk import __version__
from lineagedesk.api.router import api_router
from lineagedesk.connectors.base import SheetConnector
from lineagedesk.connectors.feishu import feishu_sheets
from lineagedesk.core.config import LineageDeskSettings, get_settings
from lineagedesk.core.errors import LineageDeskError, lineagedesk_error_handler
from lineagedesk.dashboard.app import router as dashboard_router

logger = logging.getLogger("lineagedesk")


def build_connector(settings: LineageDeskSettings) -> SheetConnector:
    return feishu_sheets(
        app_id=settings.app_id,
        app_secret=settings.app_secret,
        spreadsheet_token=settings.spreadsheet_token,
        base_url=settings.feishu_base_url,
        timeout=settings.request_timeout,
        token_refresh_margin=settings.token_refresh_margin,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown."""
    settings = app.state.settings

    if app.state.sheets is None:
        if not (settings.app_id and settings.spreadsheet_token):
            logger.warning("LINEAGEDESK_APP_ID / LINEAGEDESK_SPREADSHEET_TOKEN not set; API calls will fail")
        app.state.sheets = build_connector(settings)
    await app.state.sheets.connect()
    logger.info(f"Spreadsheet connector ready: {settings.spreadsheet_token or '<unset>'}")

    yield

    await app.state.sheets.disconnect()
    logger.info("Lineage Desk daemon stopped")


def create_app(
    settings: LineageDeskSettings | None = None,
    sheets: SheetConnector | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Lineage Desk",
        description="Data-model and lineage catalog kept in a Feishu spreadsheet",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()
    app.state.sheets = sheets

    app.add_exception_handler(LineageDeskError, lineagedesk_error_handler)
    app.include_router(api_router)
    app.include_router(dashboard_router)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": __version__,
            "spreadsheet": app.state.sheets.info() if app.state.sheets else None,
        }

    return app


def main():
    """Entry point for `lineagedeskd` command."""
    import sys

    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    host = settings.host
    port = settings.port

    # Parse CLI args (simple, no dep on typer for daemon)
    args = sys.argv[1:]
    for i, arg in enumerate(args):
        if arg == "--port" and i + 1 < len(args):
            port = int(args[i + 1])
        if arg == "--host" and i + 1 < len(args):
            host = args[i + 1]

    logger.info(f"Starting Lineage Desk daemon v{__version__} on {host}:{port}")
    logger.info(f"UI: http://{host}:{port}/?key=<api key>")

    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
