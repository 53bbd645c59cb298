from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from airlines import AirlineStore
from config import (
    AIRLINES_DATA_FILE,
    APP_VERSION,
    BOOKING_TIMER_MINUTES,
    CORS_ORIGINS,
    ENVIRONMENT,
    EXTERNAL_API_BASE,
    HOST,
    PORT,
    STRIPE_PUBLISHABLE_KEY,
)
from logging_utils import configure_logging, log_event, new_request_id
from models import (
    AirlineListResponse,
    AirlineLogoResponse,
    AirlineResponse,
    ApiError,
    FrontendConfig,
)

# ------------------------------------------------------------------------------
# APP + LOGGING SETUP
# ------------------------------------------------------------------------------

configure_logging()
logger = logging.getLogger("tripzip.api")

NOT_FOUND = "Airline not found"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiError(error=message).model_dump())


# ------------------------------------------------------------------------------
# AIRLINE ROUTES
# ------------------------------------------------------------------------------

def build_airlines_router(store: AirlineStore) -> APIRouter:
    router = APIRouter(tags=["airlines"])

    @router.get("/airlines", response_model=AirlineListResponse)
    async def list_airlines():
        try:
            return AirlineListResponse(data=store.all())
        except Exception as e:
            log_event(logger, "airlines_list_failed", level=logging.ERROR, error=str(e))
            return _error(500, "Failed to load airlines data")

    @router.get("/airlines/logo/{identifier}", response_model=AirlineLogoResponse)
    async def get_airline_logo(identifier: str):
        try:
            logo = store.resolve_logo(identifier)
        except Exception as e:
            log_event(logger, "airline_logo_failed", level=logging.ERROR, identifier=identifier, error=str(e))
            return _error(500, "Failed to load airline logo")

        if logo is None:
            log_event(logger, "airline_logo_not_found", identifier=identifier)
            return _error(404, NOT_FOUND)
        return AirlineLogoResponse(data=logo)

    @router.get("/airlines/{iata}", response_model=AirlineResponse)
    async def get_airline(iata: str):
        try:
            airline = store.find_by_code(iata)
        except Exception as e:
            log_event(logger, "airline_lookup_failed", level=logging.ERROR, iata=iata, error=str(e))
            return _error(500, "Failed to load airline data")

        if airline is None:
            log_event(logger, "airline_not_found", iata=iata)
            return _error(404, NOT_FOUND)
        return AirlineResponse(data=airline)

    return router


# ------------------------------------------------------------------------------
# SYSTEM ROUTES
# ------------------------------------------------------------------------------

system_router = APIRouter(prefix="/api", tags=["system"])


@system_router.get("/config", response_model=FrontendConfig)
async def frontend_config() -> FrontendConfig:
    return FrontendConfig(
        apiBaseUrl=EXTERNAL_API_BASE,
        environment=ENVIRONMENT,
        stripe_publishable_key=STRIPE_PUBLISHABLE_KEY,
        booking_timer_minutes=BOOKING_TIMER_MINUTES,
    )


@system_router.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "environment": ENVIRONMENT,
        "version": APP_VERSION,
    }


# ------------------------------------------------------------------------------
# APP FACTORY
# ------------------------------------------------------------------------------

def create_app(store: AirlineStore | None = None) -> FastAPI:
    app = FastAPI(title="TripZip", version=APP_VERSION)
    app.state.airlines = store or AirlineStore(AIRLINES_DATA_FILE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        rid = new_request_id()
        start = time.time()

        log_event(
            logger,
            "http_request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            request_id=rid,
        )

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log_event(
                logger,
                "http_request_finished",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=int((time.time() - start) * 1000),
                request_id=rid,
            )

    app.include_router(build_airlines_router(app.state.airlines))
    app.include_router(system_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting TripZip server on %s:%s", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_level="info", access_log=True)
