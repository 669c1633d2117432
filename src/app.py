"""Warehouse Operations FastAPI application.

Web server that processes warehouse commands synchronously via HTTP. Every
request under the warehouse routes runs inside the warehouse domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from warehouse.domain import warehouse
from warehouse.utils.logging import add_context, clear_context

warehouse.init()

_DOMAIN_PREFIXES = ("/operations", "/packages")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Warehouse Operations API",
    description="Multi-step warehouse fulfillment — operations, items and packages",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the warehouse domain context for warehouse routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with warehouse.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from warehouse.api import operation_router, package_router, register_error_handlers  # noqa: E402

app.include_router(operation_router)
app.include_router(package_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": warehouse.name})
