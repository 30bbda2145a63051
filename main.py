"""Gatekeeper - credential and session service."""

import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from gatekeeper.config import get_settings
from gatekeeper.database import get_db
from gatekeeper.errors import AuthError
from gatekeeper.routers import auth_router
from gatekeeper.services.session_store import SessionStore, get_session_store

settings = get_settings()

# Logging
logger = logging.getLogger("gatekeeper")
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

for warning in settings.validate():
    logger.warning("Config: %s", warning)

app = FastAPI(title="Gatekeeper", version="0.1.0")


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        return response


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PREFIX = "/api/v1/auth/"

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        path = request.url.path
        if request.method == "POST" and path.startswith(self.AUDIT_PREFIX):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                request.method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)

# API routers
app.include_router(auth_router)


# --- Service error handler ---
@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map service errors to status codes. Store and internal detail stays in the log."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.kind.value, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.public_message, "code": exc.kind.value},
        headers=headers,
    )


# --- Health check ---
@app.get("/api/health")
def health_check(
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> JSONResponse:
    """Health check endpoint. Reports database and session store reachability."""
    database_ok = True
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        database_ok = False

    sessions_ok = sessions.ping()
    healthy = database_ok and sessions_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "app": "gatekeeper",
            "version": "0.1.0",
            "database": "ok" if database_ok else "unavailable",
            "session_store": "ok" if sessions_ok else "unavailable",
        },
    )
