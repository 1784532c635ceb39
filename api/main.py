"""
AQI Reconcile — FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import cities, readings
from pipeline.ingestion.cities import list_cities

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "aqi-reconcile-api"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail fast if the city registry is missing
    logger.info("AQI Reconcile API starting up — %d cities registered", len(list_cities()))
    yield
    logger.info("AQI Reconcile API shutting down")


app = FastAPI(
    title="AQI Reconcile API",
    description="Multi-source AQI reconciliation for Indian cities",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(cities.router,   prefix="/api/cities",   tags=["Cities"])
app.include_router(readings.router, prefix="/api/readings", tags=["Readings"])


@app.get("/api/health", tags=["Health"])
def health():
    return {"status": "ok", "service": SERVICE_NAME, "version": VERSION}
