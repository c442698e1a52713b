"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import CategoryTreeError

logger = logging.getLogger(__name__)


async def category_tree_exception_handler(request: Request, exc: CategoryTreeError) -> JSONResponse:
    """
    Convert a CategoryTreeError into its JSON body and status code.

    Client errors are logged at WARNING, store failures at ERROR.
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.error_code.value}: {exc.message}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
