"""
CollabHub - FastAPI Application

Main entry point for the backend API.
Students and startups collaborate on projects: profiles, verification,
projects, teams, applications, milestones, tasks and messages.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from collabhub.config.settings import settings
from collabhub.domain.context import ContextRegistry
from collabhub.infrastructure.exceptions import (
    AuthenticationError,
    AuthenticationRequiredError,
    CollabHubError,
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"CollabHub Backend starting in {settings.environment} mode...")
    yield
    logger.info(f"CollabHub Backend shutting down ({len(app.state.contexts)} live contexts)...")


app = FastAPI(
    title="CollabHub",
    description="Collaboration platform connecting students and startups",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# Per-principal client contexts
app.state.contexts = ContextRegistry()

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

def _error_response(status_code: int, exc: CollabHubError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return _error_response(400, exc)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    """Handle rejected credential operations."""
    return _error_response(401, exc)


@app.exception_handler(AuthenticationRequiredError)
async def authentication_required_handler(request: Request, exc: AuthenticationRequiredError):
    return _error_response(401, exc)


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    """Handle denials. These are expected and not logged as errors."""
    return _error_response(403, exc)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return _error_response(404, exc)


@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return _error_response(409, exc)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _error_response(409, exc)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error on {request.url.path}: {exc.message}")
    return _error_response(502, exc)


@app.exception_handler(CollabHubError)
async def general_error_handler(request: Request, exc: CollabHubError):
    """Handle all other application errors."""
    logger.error(f"Unhandled application error on {request.url.path}: {exc.message}")
    return _error_response(500, exc)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "collabhub"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "CollabHub API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from collabhub.api.routes import (  # noqa: E402
    applications,
    auth,
    messages,
    milestones,
    navigation,
    notifications,
    profiles,
    projects,
    reviews,
    session,
    teams,
    verification,
)

app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(profiles.router, prefix="/api", tags=["Profiles"])
app.include_router(verification.router, prefix="/api", tags=["Verification"])
app.include_router(projects.router, prefix="/api", tags=["Projects"])
app.include_router(milestones.router, prefix="/api", tags=["Milestones & Tasks"])
app.include_router(teams.router, prefix="/api", tags=["Teams"])
app.include_router(applications.router, prefix="/api", tags=["Applications"])
app.include_router(messages.router, prefix="/api", tags=["Messages"])
app.include_router(notifications.router, prefix="/api", tags=["Notifications"])
app.include_router(reviews.router, prefix="/api", tags=["Reviews"])
app.include_router(navigation.router, prefix="/api", tags=["Navigation"])
app.include_router(session.router, prefix="/api", tags=["Session"])
