"""
ERP Production Costing API
FastAPI service exposing the ficha técnica (BOM) calculator and the
production-order cost projector to the back-office dashboard.
"""
from dotenv import load_dotenv

# .env must be loaded before erp_costing.config reads the environment
load_dotenv()

import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from erp_costing import config
from erp_costing.api.production_routes import router as production_router
from erp_costing.services.logging_config import setup_logging
from erp_costing.services.middleware import RequestTimingMiddleware

setup_logging(level=config.LOG_LEVEL, json_output=config.LOG_JSON)
logger = logging.getLogger("erp-costing-api")

# Record process start time for uptime calculation
_PROCESS_START = time.monotonic()


app = FastAPI(
    title="ERP Production Costing API",
    version=config.API_VERSION,
    description="BOM cost breakdown and production order pricing",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With", "X-Request-ID"],
)
# Request timing + X-Request-ID must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)

app.include_router(production_router)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "version": config.API_VERSION,
        "uptime_s": round(time.monotonic() - _PROCESS_START, 1),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("erp_costing.main:app", host="0.0.0.0", port=8000)
