"""
Joinery Estimator API
FastAPI backend pricing cabinet-shop quotes: sheet rates, cabinet material and
hardware costs, joinery item subtotals and marked-up quote totals.
"""
import os
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.services.logging_config import setup_logging
from app.services.middleware import RequestTimingMiddleware

# Load .env file automatically in dev (no-op if the file is missing)
load_dotenv()

_log_level = os.getenv("LOG_LEVEL", "INFO")
_json_logs = os.getenv("LOG_FORMAT", "json").lower() != "text"
setup_logging(
    level=_log_level,
    json_output=_json_logs,
    pricing_level=os.getenv("PRICING_LOG_LEVEL"),
)
logger = logging.getLogger("joinery-api")

if not os.getenv("DATABASE_URL"):
    logger.warning("MISSING env var: DATABASE_URL — running in dev mode")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        from app.db import init_db
        await init_db()
        logger.info("SQLAlchemy models synced.")
    except Exception as e:
        logger.warning(f"Table init warning: {e}")
    yield


app = FastAPI(
    title="Joinery Estimator API",
    version="1.0.0",
    description="Cost calculation for cabinet and joinery quotes",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS: allowed origins from env
# ---------------------------------------------------------------------------
_cors_default = "http://localhost:3000,http://localhost:8000"
cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "X-Requested-With", "X-Request-ID"],
)
# Request timing + X-Request-ID must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)

# Routers
from app.api.pricing_routes import router as pricing_router
from app.api.settings_routes import router as settings_router

app.include_router(pricing_router)
app.include_router(settings_router)


@app.get("/health")
async def health_check():
    return {
        "status": "active",
        "version": "1.0.0",
        "db_configured": bool(os.getenv("DATABASE_URL")),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
