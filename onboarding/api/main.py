import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from onboarding import __version__
from onboarding.core.config import get_settings
from onboarding.core.logger import configure_from_settings
from onboarding.core.workflow import WorkflowError
from onboarding.api.schemas.common import ErrorResponse
from onboarding.api.routers import (
    auth,
    users,
    applications,
    documents,
    approvals,
    contracts,
    notifications,
)

settings = get_settings()

configure_from_settings(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Supplier onboarding and approval workflow",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    """Map workflow failures to HTTP; the session was rolled back by get_db."""
    logger.info(
        "%s %s rejected: %s (%s)",
        request.method, request.url.path, exc.message, type(exc).__name__,
    )
    body = ErrorResponse(error=type(exc).__name__, detail=exc.message, action=exc.action)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(applications.router, prefix="/api")
app.include_router(documents.router, prefix="/api")
app.include_router(approvals.router, prefix="/api")
app.include_router(contracts.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
