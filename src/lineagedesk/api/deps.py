"""Request-scoped dependencies shared by the API routers."""

from fastapi import HTTPException, Request

from lineagedesk.services.catalog_service import CatalogService


def get_catalog(request: Request) -> CatalogService:
    """Catalog service bound to the daemon's spreadsheet connector."""
    sheets = getattr(request.app.state, "sheets", None)
    if sheets is None:
        raise HTTPException(503, "Spreadsheet connector not initialized")
    return CatalogService.from_settings(sheets, request.app.state.settings)
