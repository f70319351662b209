import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from marketplace.logging_config import setup_logging
from marketplace.models import ReadinessResponse
from marketplace.routers import bookings, clients, providers
from marketplace.services.marketplace_store import marketplace_store

setup_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FILE") or None)
logger = logging.getLogger(__name__)

app = FastAPI(title="Service Booking Marketplace API", version="0.1.0")


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


cors_origins = _parse_csv_env("CORS_ORIGINS", "*")
allow_any_origin = len(cors_origins) == 1 and cors_origins[0] == "*"

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # Browsers reject wildcard CORS with credentials enabled.
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)

trusted_hosts = _parse_csv_env("TRUSTED_HOSTS", "*")
if not (len(trusted_hosts) == 1 and trusted_hosts[0] == "*"):
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

app.include_router(providers.router)
app.include_router(clients.router)
app.include_router(bookings.router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/ready", response_model=ReadinessResponse)
def ready():
    try:
        reachable = marketplace_store.ping()
    except Exception:
        logger.exception("Readiness check failed to reach the entity store")
        reachable = False
    return ReadinessResponse(
        status="ready" if reachable else "degraded",
        store_reachable=reachable,
        repeat_reviews_allowed=marketplace_store.allow_repeat_reviews,
    )
