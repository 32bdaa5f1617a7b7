"""
FastAPI server for Flowline Core
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Config
from .routes import router
from ..core.bootstrap import get_container

app = FastAPI(title="Flowline Core API", version="0.1.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
async def startup():
    """Initialize services on startup"""
    # Build container and store in app.state for route access (tests may preset one)
    if getattr(app.state, "container", None) is None:
        app.state.container = get_container(mode=Config.MODE)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Flowline Core",
        "version": "0.1.0",
        "mode": Config.MODE,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "mode": Config.MODE
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=Config.API_HOST, port=Config.API_PORT)
