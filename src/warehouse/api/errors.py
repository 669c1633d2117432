"""HTTP error mapping for the Warehouse API.

Protean's handlers cover validation (400), not found (404) and invalid
state (409). Version conflicts are reported as 409 too, and infrastructure
failures surface as a generic 500 without internal details.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import DatabaseError, ExpectedVersionError, TransactionError
from protean.integrations.fastapi import register_exception_handlers

logger = structlog.get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(ExpectedVersionError)
    async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        logger.warning("Concurrent update rejected", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=409,
            content={"error": "The resource was modified concurrently, retry the request"},
        )

    @app.exception_handler(TransactionError)
    @app.exception_handler(DatabaseError)
    async def transaction_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Transaction failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Transaction failed"})
