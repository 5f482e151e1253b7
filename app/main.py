# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.config.database import engine, init_db
from app.config.settings import settings
from app.delivery.api.frames import router as api_router
from app.delivery.web.pages import router as pages_router

logger = logging.getLogger("uvicorn.error")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Service '{settings.PROJECT_NAME}' starting (mode: {settings.ENVIRONMENT}).")
    await init_db()
    yield
    logger.info("Disposing database engine...")
    await engine.dispose()
    logger.info("Service stopped.")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Personal frame collages: collections of positioned frames rendered in a responsive grid",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} frames service", "version": "1.0.0", "status": "ok"}

@app.get(f"{settings.API_V1_STR}/health")
async def health_check():
    return {"status": "ok", "service": settings.PROJECT_NAME}

# Catch-all /{username} routes go last; "docs", "redoc" and "openapi.json" are reserved usernames
app.include_router(pages_router)
