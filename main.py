"""
Beer Festival API

FastAPI backend that keeps a local copy of the festival beer list in sync
with the remote feed and serves ordered, filterable views of it.

Usage:
    uvicorn main:app --reload
"""

# Load environment variables from .env file FIRST
from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI

from beerfest.config import Config

# Configure logging from environment
logging.basicConfig(
    level=getattr(logging, Config.log_level(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
logger.info(f"Starting with LOG_LEVEL={Config.log_level()}")

from beerfest.routes import beers_router, sync_router

app = FastAPI(
    title="Beer Festival API",
    description="Browse, bookmark and rate the beers at the festival",
    version="0.1.0",
)

# Include routers
app.include_router(beers_router, tags=["beers"])
app.include_router(sync_router, tags=["sync"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Beer Festival API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
