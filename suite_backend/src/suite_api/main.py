import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_setup import setup_logging
from .profiles import AuthenticationError
from .routers import budget as budget_router
from .routers import clients as clients_router
from .routers import collab as collab_router
from .routers import files as files_router
from .routers import knowledge as knowledge_router
from .routers import risks as risks_router
from .routers import tasks as tasks_router
from .routers import timetrack as timetrack_router
from .routers import validate as validate_router
from .routers import workspace as workspace_router
from .settings import get_settings
from .store import StoreError
from .utils import error_envelope

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "taskmaster", "description": "Task CRUD with exact-match filters."},
    {"name": "timetrack", "description": "Time entries and the weekly time summary."},
    {"name": "budget", "description": "Project budgets and expenses."},
    {"name": "clients", "description": "CRM contacts."},
    {"name": "collab", "description": "Team chat channels and messages."},
    {"name": "knowledge", "description": "Knowledge base pages."},
    {"name": "risks", "description": "Risk register with derived risk scores."},
    {"name": "validate", "description": "Field validation for forms."},
    {"name": "files", "description": "Base64 file uploads to object storage."},
    {
        "name": "workspace",
        "description": "Per-user dashboard, integration notifications, resource assignment and profile.",
    },
]

ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"

_settings = get_settings()
setup_logging(_settings.log_level)

app = FastAPI(
    title="Productivity Suite Backend",
    description="Backend API for the productivity suite: tasks, time tracking, budgets, CRM, chat and more.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)


def cors_headers(request: Request) -> Dict[str, str]:
    """
    Fixed CORS headers for every response.

    With '*' configured every origin is allowed; otherwise a listed request
    origin is echoed back and anything else gets the first configured origin.
    """
    origins = get_settings().cors_allow_origins
    if not origins or "*" in origins:
        allow_origin = "*"
    else:
        origin = request.headers.get("origin")
        allow_origin = origin if origin in origins else origins[0]
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    """Answer every OPTIONS preflight with 200 "ok" and stamp CORS headers on all responses."""
    headers = cors_headers(request)
    if request.method == "OPTIONS":
        return PlainTextResponse("ok", headers=headers)
    response = await call_next(request)
    response.headers.update(headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "success": false,
            "error": "Request validation failed",
            "data": null,
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=400,
        content=error_envelope("Request validation failed", detail=jsonable_encoder(exc.errors())),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=error_envelope(exc.message),
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Store failures end the request with 500 and the store's own message."""
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=500, content=error_envelope(exc.message, data=[]))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_envelope(str(exc) or "Internal server error"),
        headers=cors_headers(request),
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the configured store backend.
    """
    return {"message": "Healthy", "backend": get_settings().store_backend}


# Include routers
app.include_router(tasks_router.router)
app.include_router(timetrack_router.router)
app.include_router(budget_router.router)
app.include_router(clients_router.router)
app.include_router(collab_router.router)
app.include_router(knowledge_router.router)
app.include_router(risks_router.router)
app.include_router(validate_router.router)
app.include_router(files_router.router)
app.include_router(workspace_router.router)
