"""Error middleware: request ids and JSON error bodies.

Every response carries an ``X-Request-ID`` header. Errors come back in
the same envelope the JSON API uses for success::

    {"success": false, "message": "...", "details": {...}, "request_id": "..."}
"""

import logging
import uuid
from typing import Any, Callable, Dict

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from travel_diary.core.exceptions import AppException

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def error_body(exc: AppException, request_id: str) -> Dict[str, Any]:
    return {
        "success": False,
        "message": exc.message,
        "details": exc.details,
        "request_id": request_id,
    }


def _error_response(status_code: int, body: Dict[str, Any], request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers={REQUEST_ID_HEADER: request_id},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and turn escaped exceptions into JSON.

    ``AppException`` keeps its own status and message. Anything else is
    logged with its traceback and reported as a 500.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except AppException as exc:
            logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
            return _error_response(exc.status_code, error_body(exc, request_id), request_id)
        except Exception as exc:
            logger.exception(f"{request.method} {request.url.path} failed")
            return _error_response(
                500,
                {
                    "success": False,
                    "message": "Internal server error",
                    "error": str(exc),
                    "request_id": request_id,
                },
                request_id,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the ``AppException`` handler for errors raised inside routes."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return _error_response(exc.status_code, error_body(exc, request_id), request_id)
