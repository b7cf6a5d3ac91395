from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.core.request_context import request_id_ctx_var


class StoreError(Exception):
    """The entry store could not answer a query."""


class EntryNotFoundError(StoreError):
    def __init__(self, entry_id: int) -> None:
        super().__init__(f"Entry {entry_id} not found")
        self.entry_id = entry_id


def _error_payload(code: str, message: str, detail):
    return {
        "error": {
            "code": code,
            "message": message,
            "detail": detail,
        },
        "detail": detail,
        "request_id": request_id_ctx_var.get(),
    }


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(
            code=f"http_{exc.status_code}",
            message=str(exc.detail),
            detail=exc.detail,
        ),
        headers=exc.headers,
    )


async def entry_not_found_handler(_: Request, exc: EntryNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_payload(
            code="entry_not_found",
            message=str(exc),
            detail={"entry_id": exc.entry_id},
        ),
    )


async def store_error_handler(_: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_payload(
            code="store_error",
            message="Entry store query failed",
            detail=str(exc),
        ),
    )
