"""
NutriVibe: FastAPI backend for AI meal planning and nutrition guidance.

Run with: uvicorn nutrivibe.main:app --reload

Architecture:
- Quota-checked generation against an OpenAI-compatible LLM (Groq)
- Prompt builders for meal plans, recipes, nutrition education and shopping lists
- Tolerant parsing of model output into structured records
- Persistence of generated artifacts in Supabase
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nutrivibe.config import get_settings
from nutrivibe.api import health, ai, artifacts, subscription

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PUBLIC_PATHS = ["/", "/health", "/docs", "/openapi.json", "/redoc"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting NutriVibe backend...")
    if settings.llm_configured:
        logger.info(f"LLM: {settings.llm_model} at {settings.llm_base_url}")
    else:
        logger.warning("GROQ_API_KEY not set - generation requests will fail")

    yield

    logger.info("Shutting down NutriVibe backend...")


app = FastAPI(
    title="NutriVibe",
    description="AI meal planning & nutrition guidance API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS - allow frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "*",  # For development - restrict in production
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def verify_api_key(request: Request, call_next):
    """Verify API key for protected endpoints."""
    path = request.url.path
    if path in PUBLIC_PATHS or path.startswith("/health/"):
        return await call_next(request)

    expected_key = settings.api_key

    # If no key configured, allow all (dev mode)
    if not expected_key:
        return await call_next(request)

    if request.headers.get("X-API-Key") != expected_key:
        host = request.client.host if request.client else "unknown"
        logger.warning(f"Invalid API key attempt from {host}")
        return JSONResponse(
            status_code=401,
            content={"detail": "Invalid or missing API key"}
        )

    return await call_next(request)


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(ai.router, prefix="/api/ai", tags=["ai"])
app.include_router(artifacts.router)  # /api/artifacts
app.include_router(subscription.router)  # /api/subscription


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "NutriVibe",
        "version": "1.0.0",
        "description": "AI meal planning & nutrition guidance API",
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "ai": "/api/ai",
            "artifacts": "/api/artifacts",
            "subscription": "/api/subscription",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "nutrivibe.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=not settings.is_production,
    )
