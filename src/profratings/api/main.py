"""
FastAPI application for the ProfRatings API
Provides endpoints for professors, pending reviews, login and professor search
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..core.config import get_settings
from ..database.kv import check_store_health, close_redis
from .routers import auth, professors, reviews, search

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} API with {settings.kv_backend} store")
    yield
    await close_redis()


app = FastAPI(
    title=f"{settings.app_name} API",
    description="**Professor Rating API**<br>Browse professors, submit reviews and search by name, class or department.<br><br>**Features:**<br>- **Professors**: Professor records with reviews grouped by course<br>- **Reviews**: Queue reviews for analysis and commit them once analyzed<br>- **Search**: Fuzzy name search, class and department search with filters<br>",
    version=settings.version,
    license_info={
        "name": "MIT License",
        "url": "https://opensource.org/licenses/MIT",
    },
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(professors.router)
app.include_router(reviews.router)
app.include_router(auth.router)
app.include_router(search.router)


@app.get(
    "/",
    responses={
        200: {
            "description": "Welcome message",
            "content": {
                "application/json": {
                    "example": {"message": "Welcome to ProfRatings API"},
                }
            },
        }
    },
    summary="/",
    description="API root endpoint. Returns welcome message.",
    tags=["General"],
)
async def root():
    """
    Root endpoint - API welcome message

    Returns a simple welcome message to confirm the API is running.
    """
    return {"message": f"Welcome to {settings.app_name} API"}


@app.get(
    "/health",
    responses={
        200: {
            "description": "System health status",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "store": {"status": "connected", "backend": "redis"},
                        "api_version": "1.0.0",
                    }
                }
            },
        }
    },
    summary="/health",
    description="Returns system health status including key-value store connectivity.",
    tags=["System Health"],
)
async def health_check():
    """
    Health check endpoint with store status
    """
    store_health = await check_store_health(settings)
    status = "healthy" if store_health["status"] == "connected" else "unhealthy"
    if status != "healthy":
        logger.error(f"Health check failed: {store_health.get('error')}")
    return {"status": status, "store": store_health, "api_version": settings.version}
