from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from apps.api.errors import register_exception_handlers
from apps.api.routes import annonces, health
from apps.core.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "startup complete", extra={"env": settings.environment, "port": os.getenv("PORT", "8000")}
    )
    yield


# Create FastAPI app
app = FastAPI(
    title="CAPY Invest API",
    description="Annonces (advisor listings) publication and search",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router, prefix="/api")
app.include_router(annonces.router, prefix="/api", tags=["annonces"])


@app.get("/")
async def root():
    return {"message": "CAPY Invest API", "version": "1.0.0"}
