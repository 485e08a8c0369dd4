"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from contactbook.api import contacts, users
from contactbook.config import get_settings
from contactbook.database import init_db
from contactbook.errors import ContactBookError, UnauthenticatedError, UpstreamFailure

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.auto_create_tables:
        init_db()
    yield


app = FastAPI(
    title="Contact Book API",
    description="Multi-user address book with search, pagination and export",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(ContactBookError)
async def contactbook_error_handler(request: Request, exc: ContactBookError):
    """Map domain errors to their HTTP status with a fixed message."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    if isinstance(exc, UpstreamFailure):
        logger.error(f"{request.method} {request.url.path} failed: {exc.__cause__!r}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Log store failures server side and return a generic message."""
    logger.exception(f"Database error on {request.method} {request.url.path}")
    failure = UpstreamFailure()
    return JSONResponse(status_code=failure.status_code, content={"detail": failure.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report invalid request bodies and parameters as 400."""
    errors = [
        {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"detail": "Invalid request", "errors": errors}),
    )


# Register routers
app.include_router(users.router)
app.include_router(contacts.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
