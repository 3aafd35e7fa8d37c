# guid_sharder/main.py

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from guid_sharder.api.middleware import CorrelationIdMiddleware, RequestAuditMiddleware
from guid_sharder.api.routers import health, metrics, shards
from guid_sharder.application.exceptions import ApplicationError
from guid_sharder.config.logging import configure_logging
from guid_sharder.config.settings import get_settings
from guid_sharder.domain.exceptions import ConfigValidationError, DomainError, DomainValidationError

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestAudit.
app.add_middleware(RequestAuditMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(ConfigValidationError)
async def config_validation_error_handler(request, exc: ConfigValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "issues": exc.issues})


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /metrics, /shards
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(shards.router, prefix="/shards")
