import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal.api.account import router as account_router
from portal.api.booking import router as booking_router
from portal.api.projects import router as projects_router
from portal.application.dto.booking_request import first_error_message
from portal.application.exceptions import PortalError
from portal.core.config import settings
from portal.wiring.dependencies import get_record_store, get_scheduling_relay


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("endpoint", "status_code", "error", "month", "date", "appointment_id", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.missing_booking_settings()
    if missing and not settings.ACUITY_USE_MOCK:
        logger.warning(
            "Booking endpoints will fail until configured",
            extra={"reason": "missing " + ", ".join(missing)},
        )

    relay = get_scheduling_relay()
    store = get_record_store()
    if settings.ACUITY_VALIDATE_ON_STARTUP and not missing:
        await relay.validate_credentials()

    yield

    await relay.aclose()
    await store.aclose()


app = FastAPI(title="Client Portal API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(booking_router, tags=["booking"])
app.include_router(projects_router, tags=["projects"])
app.include_router(account_router, tags=["account"])


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "message": first_error_message(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"endpoint": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "An unexpected error occurred"},
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/ping")
def ping() -> dict[str, str]:
    return {"message": settings.PING_MESSAGE}
