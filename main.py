"""
Site Design Advisor - Main Application

A FastAPI backend that screenshots a website, asks Claude (Anthropic) for
design recommendations, and serves a ranked, votable slate of them backed by
Redis.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from api.routes import router
from config import settings
from core.exceptions import AdvisorError
from core.store import close_store

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Shutdown: release the Redis connection pool
    close_store()


# Initialize FastAPI app
app = FastAPI(title="Site Design Advisor", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


# Every error leaves the API as {"error": message}
@app.exception_handler(AdvisorError)
async def advisor_error_handler(request: Request, exc: AdvisorError):
    logger.error(f"ERROR: {type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {message}"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"ERROR: Unexpected failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include all routes from api/routes.py
app.include_router(router)

# Stored screenshots resolve to fetchable URLs
app.mount(
    "/screenshots",
    StaticFiles(directory=settings.STORAGE_DIR, check_dir=False),
    name="screenshots",
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60)
