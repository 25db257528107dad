"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swap_classifier.api.routes import classify, records
from swap_classifier.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Solana transaction swap classification API"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(classify.router, prefix=f"{settings.api_prefix}/classify", tags=["classify"])
app.include_router(records.router, prefix=f"{settings.api_prefix}/records", tags=["records"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Swap Classifier API",
        "version": settings.api_version,
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
