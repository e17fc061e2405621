"""
Wire envelope. Every response is {success, status, message, data}; errors add `error`
(detail string) outside production.
"""
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from tracker.config import settings
from tracker.services.result import Ok, Result


def envelope(success: bool, status: int, message: str, data=None, error: str | None = None) -> dict:
    body = {"success": success, "status": status, "message": message, "data": data}
    if not success and error is not None and not settings.is_production:
        body["error"] = error
    return body


def error_response(status: int, message: str, detail: str | None = None, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=envelope(False, status, message, None, detail),
        headers=headers,
    )


def render(result: Result) -> JSONResponse:
    """Ok -> success envelope with camelCase data; Err -> error envelope with the kind's status."""
    if isinstance(result, Ok):
        return JSONResponse(
            status_code=result.status,
            content=envelope(True, result.status, result.message, jsonable_encoder(result.data, by_alias=True)),
        )
    return error_response(result.status, result.message, result.detail)
