"""
FastAPI Application Entry Point
App setup, middleware and router registration
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import settings
from app.database import connect_db, disconnect_db
from app.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
access_logger = logging.getLogger("app.access")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One log line per API request with status and duration"""
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        access_logger.log(level, "%s %s -> %d (%.1f ms)",
                          request.method, request.url.path, response.status_code, elapsed_ms)
        return response


app = FastAPI(
    title=settings.APP_NAME,
    description="Sports talent platform: students, coaches, clubs, institutes, events and orders",
    version="1.0.0",
    debug=settings.DEBUG
)

# Any origin while developing; the web app and API hosts otherwise
cors_origins = ["*"] if settings.APP_ENV == "development" else [settings.FRONTEND_URL, settings.APP_URL]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    # Services put the missing resource in the detail ("Event not found")
    detail = getattr(exc, "detail", None) or "Not Found"
    return JSONResponse(status_code=404, content={"detail": detail})


@app.on_event("startup")
async def startup():
    await connect_db()
    logger.info("[START] %s started in %s mode", settings.APP_NAME, settings.APP_ENV)


@app.on_event("shutdown")
async def shutdown():
    await disconnect_db()
    logger.info("[STOP] Shutdown complete")


@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "environment": settings.APP_ENV,
        "version": "1.0.0"
    }


from app.routes import (  # noqa: E402
    admin, auth, certificates, club, coach, event_incharge, events, institute, notifications, payment, student
)

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(student.router, prefix="/api/student", tags=["Student"])
app.include_router(coach.router, prefix="/api/coach", tags=["Coach"])
app.include_router(club.router, prefix="/api/club", tags=["Club"])
app.include_router(institute.router, prefix="/api/institute", tags=["Institute"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(event_incharge.router, prefix="/api/event-incharge", tags=["Event In-charge"])
app.include_router(payment.router, prefix="/api/payment", tags=["Payments"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(notifications.router, prefix="/api/admin/notifications", tags=["Admin Notifications"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(certificates.router, prefix="/api/certificates", tags=["Certificates"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.APP_ENV == "development")
