"""FastAPI web application."""

from fastapi import FastAPI

from .routes import tracking

# Create FastAPI app
app = FastAPI(
    title="Digestigo",
    description="Digestive health tracking from chat messages",
    version="0.1.0",
)

# Include routers
app.include_router(tracking.router, prefix="/tracking", tags=["tracking"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
