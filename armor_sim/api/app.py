"""FastAPI application for the armor penetration estimator."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from armor_sim import __version__
from .api_routes import router

# Initialize FastAPI app
app = FastAPI(
    title="Armor Sim",
    description="Monte-Carlo armor penetration estimator",
    version=__version__,
)

# The hosting application may be served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api")

@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "armor-sim"}
