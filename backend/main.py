"""
FastAPI application for NBA Edge Analyzer
Thin HTTP shell around the matchup analysis engine
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from dotenv import load_dotenv

from backend.core.engine_config import EngineConfig
from backend.core.records import RosterUnavailable
from backend.services.matchup_modifier import DefenseProfileCache
from backend.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    DefenseIn,
    DefenseProfileResponse,
)

load_dotenv()

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    app.state.engine_config = EngineConfig.from_env()
    app.state.defense_cache = DefenseProfileCache()
    logger.info("Starting NBA Edge Analyzer (%r)", app.state.engine_config)
    yield
    logger.info("Shutting down NBA Edge Analyzer")


app = FastAPI(
    title="NBA Edge Analyzer",
    description="NBA player projection and matchup valuation engine",
    version="1.0",
    lifespan=lifespan,
)

# CORS (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    return {
        "app": "NBA Edge Analyzer",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}


# ============================================================================
# ANALYSIS
# ============================================================================

@app.post("/api/analysis", response_model=AnalysisResponse)
async def run_analysis(payload: AnalysisRequest, request: Request):
    """
    Analyse one matchup.

    Defense profiles missing from the payload are taken from the app cache;
    a team with no cached profile gets a neutral matchup modifier.
    """
    cache: DefenseProfileCache = request.app.state.defense_cache
    config: EngineConfig = request.app.state.engine_config

    result = payload.run(config, defense_lookup=cache.get)

    if isinstance(result, RosterUnavailable):
        raise HTTPException(
            status_code=422,
            detail={"error": "RosterUnavailable", "team_id": result.team_id, "reason": result.reason},
        )

    return AnalysisResponse.from_record(result)


@app.put("/api/defense/{team_id}", response_model=DefenseProfileResponse)
async def put_defense_profile(team_id: str, payload: DefenseIn, request: Request):
    """Store (or replace) a team's defense profile in the app cache."""
    profile = payload.to_record(team_id)
    request.app.state.defense_cache.set(profile)
    logger.info("Stored defense profile for %s (overall rank %d)", team_id, profile.overall)
    return DefenseProfileResponse.from_record(profile)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
