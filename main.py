"""
Cellar Pairing API

FastAPI backend for wine label resolution and food pairing search.

Usage:
    uvicorn main:app --reload
"""

# Load environment variables from .env file FIRST
from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cellar.config import Config

logging.basicConfig(
    level=getattr(logging, Config.log_level(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
logger.info(f"Starting with LOG_LEVEL={Config.log_level()}, MOCK_EMBEDDINGS={Config.use_mock_embeddings()}")

from cellar.routes import embeddings_router, pairing_router, wines_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    logger.info("Service ready to handle requests")
    yield


app = FastAPI(
    title="Cellar Pairing API",
    description="Resolve scanned wines and find food pairings in your cellar",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(wines_router, tags=["wines"])
app.include_router(pairing_router, tags=["food-pairing"])
app.include_router(embeddings_router, tags=["embeddings"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Cellar Pairing API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "embedding_model": Config.embedding_model(),
        "mock_embeddings": Config.use_mock_embeddings(),
    }
