"""
Concierge AI Service - FastAPI Application
LLM Provider:
- If OPENAI_API_KEY is set: use OpenAI (or an OpenAI-compatible gateway)
- If no OPENAI_API_KEY: use Ollama
"""

from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .api import chat_router, descriptions_router, knowledge_router, trips_router
from .config import settings
from .runtime import build_runtime
from .schemas.ai_schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("=" * 50)
    logger.info("Starting Concierge AI Service")
    logger.info("=" * 50)
    logger.info(f"Environment: {settings.API_ENV}")
    
    runtime = build_runtime()
    app.state.runtime = runtime
    await runtime.start()
    
    yield
    
    await runtime.shutdown()
    logger.info("Concierge AI Service shutdown complete")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Concierge AI Service",
    description="Knowledge-grounded concierge, trip planner and listing copywriter. Supports OpenAI and Ollama.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)
app.include_router(trips_router)
app.include_router(descriptions_router)
app.include_router(knowledge_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Concierge AI Service",
        "version": "1.0.0",
        "status": "running",
        "llm_provider": "OpenAI" if settings.use_openai else "Ollama",
        "docs": "/docs",
        "endpoints": [
            "/api/ai/health",
            "/api/ai/chat/ask",
            "/api/ai/trips/discover",
            "/api/ai/descriptions",
            "/api/ai/knowledge/sync"
        ]
    }


@app.get("/api/ai/health", response_model=HealthResponse)
async def health_check():
    runtime = getattr(app.state, "runtime", None)
    checks = await runtime.health() if runtime is not None else {}
    
    status = "starting"
    if runtime is not None:
        status = "healthy" if checks.get("database") and checks.get("vector_db") else "degraded"
    
    return HealthResponse(
        status=status,
        environment=settings.API_ENV,
        llm_provider="OpenAI" if settings.use_openai else "Ollama",
        sync_running=bool(runtime and runtime.coordinator.is_syncing),
        timestamp=datetime.now(),
        **checks
    )


def run():
    uvicorn.run(
        "concierge_ai.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_ENV == "development"
    )


if __name__ == "__main__":
    run()
