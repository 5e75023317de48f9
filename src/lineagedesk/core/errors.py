"""Exception hierarchy and the FastAPI handler that renders it."""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("lineagedesk.api")


class LineageDeskError(Exception):
    """Base application exception."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class SheetsAPIError(LineageDeskError):
    """The spreadsheet provider answered with a non-zero code or not at all."""

    status_code = status.HTTP_502_BAD_GATEWAY

    prefix = "Spreadsheet API call failed"

    def __init__(self, code: int, msg: str) -> None:
        self.code = code
        self.msg = msg
        super().__init__(f"{self.prefix}: {msg} (code={code})")


class SheetsAuthError(SheetsAPIError):
    """Tenant access token could not be obtained."""

    prefix = "Failed to obtain tenant_access_token"


def model_label(layer: str, name: str) -> str:
    return f"{layer}-{name}"


class ModelExistsError(LineageDeskError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, layer: str, name: str) -> None:
        self.layer = layer
        self.name = name
        super().__init__(f"Model {model_label(layer, name)} already exists in this layer")


class ModelNotFoundError(LineageDeskError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, layer: str, name: str, hint: str = "") -> None:
        self.layer = layer
        self.name = name
        message = f"Model {model_label(layer, name)} does not exist"
        if hint:
            message = f"{message}, {hint}"
        super().__init__(message)


class LineageExistsError(LineageDeskError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Lineage {source} -> {target} already exists")


class LineageNotFoundError(LineageDeskError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(
            f"{source} and {target} both exist, but there is no lineage between them"
        )


async def lineagedesk_error_handler(request: Request, exc: LineageDeskError) -> JSONResponse:
    """Render a LineageDeskError as a JSON response.

    Provider failures are logged here; client errors only reach the caller.
    """
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )
