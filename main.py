"""
Wedding Planner Backend - FastAPI application
Main application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from app.core.config import settings
from app.core.db import engine, Base
from app.core.errors import SeatingError
from app.api import (
    routes_budget,
    routes_guests,
    routes_public,
    routes_seating,
    routes_tables,
    routes_tasks,
    ws,
)
from app.utils.responses import seating_error_response

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    if not settings.USE_FIREBASE:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    else:
        logger.info("Using Firestore seat ledger")
    yield
    logger.info("Application shutdown")

app = FastAPI(
    title="Wedding Planner Seating API",
    description="Tables, guests, seat assignment, tasks and budget for wedding planning",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(SeatingError)
async def handle_seating_error(request: Request, exc: SeatingError):
    """Render domain errors with the standard error envelope"""
    logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code}")
    return seating_error_response(exc)

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_tables.router, prefix="/tables", tags=["tables"])
app.include_router(routes_guests.router, prefix="/guests", tags=["guests"])
app.include_router(routes_seating.router, prefix="/seating", tags=["seating"])
app.include_router(routes_tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(routes_budget.router, prefix="/budget", tags=["budget"])
app.include_router(ws.router, prefix="/ws", tags=["websocket"])

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
