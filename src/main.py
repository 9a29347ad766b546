"""
Alert Trust-Scoring Service
HTTP wrapper around the alert verification engine
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables early so Settings picks them up
load_dotenv()

from alerttrust.config import get_settings
from alerttrust.models import Alert, VerificationFlag, VerificationResult, VerificationStats
from alerttrust.stats import compute_verification_stats
from alerttrust.trust_engine import AlertVerificationEngine, build_engine

settings = get_settings()

# Logging configuration
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('logs/alerttrust.log') if os.path.exists('logs') else logging.NullHandler()
    ]
)

logger = logging.getLogger(__name__)


class Metrics:
    """Track service metrics"""

    def __init__(self):
        self.total_alerts = 0
        self.verified_alerts = 0
        self.failed_verifications = 0
        self.total_processing_time = 0.0
        self.start_time = time.time()

    def record(self, results: List[VerificationResult]):
        for result in results:
            self.total_alerts += 1
            if result.is_verified:
                self.verified_alerts += 1
            if VerificationFlag.VERIFICATION_ERROR in result.flags:
                self.failed_verifications += 1
            self.total_processing_time += result.processing_time

    def get_stats(self) -> Dict[str, Any]:
        uptime = time.time() - self.start_time
        avg_time = self.total_processing_time / self.total_alerts if self.total_alerts > 0 else 0

        return {
            "total_alerts": self.total_alerts,
            "verified_alerts": self.verified_alerts,
            "failed_verifications": self.failed_verifications,
            "verification_rate": f"{(self.verified_alerts / self.total_alerts * 100):.1f}%" if self.total_alerts > 0 else "N/A",
            "average_processing_time": f"{avg_time:.2f}ms",
            "uptime_seconds": int(uptime)
        }


metrics = Metrics()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.title} v{settings.version}")
    logger.info("=" * 60)
    logger.info(f"  Verification threshold: {settings.verification_threshold}")
    logger.info(f"  Max concurrency: {settings.max_concurrency}")
    logger.info(f"  Heuristics: {settings.heuristics_path or 'built-in'}")

    app.state.engine = build_engine(settings)

    logger.info("Service ready")
    yield
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.title,
    version=settings.version,
    description="Multi-factor trust scoring for emergency alerts",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG") else "An error occurred"
        }
    )


def get_engine(request: Request) -> AlertVerificationEngine:
    return request.app.state.engine


@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": settings.title,
        "version": settings.version,
        "status": "operational",
        "endpoints": {
            "verify": "POST /verify",
            "verify_batch": "POST /verify/batch",
            "stats": "POST /stats",
            "health": "GET /health",
            "metrics": "GET /metrics"
        },
        "lookups": {
            "reputation": settings.reputation_api_url or "simulated",
            "disaster_zone": settings.disaster_zone_api_url or "simulated",
            "official_feed": settings.official_feed_api_url or "simulated"
        }
    }


@app.get("/health")
async def health_check(request: Request):
    engine_loaded = getattr(request.app.state, "engine", None) is not None
    return {
        "status": "healthy" if engine_loaded else "starting",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "metrics": metrics.get_stats()
    }


@app.get("/metrics")
async def get_metrics():
    return {
        "service": settings.title,
        "version": settings.version,
        "metrics": metrics.get_stats()
    }


@app.post("/verify", response_model=VerificationResult)
async def verify_alert(alert: Alert, request: Request):
    """Verify a single alert"""
    logger.info(f"[{alert.id}] Verifying alert from {alert.source.name or alert.source.id}")
    result = await get_engine(request).verify(alert)
    metrics.record([result])
    return result


@app.post("/verify/batch", response_model=List[VerificationResult])
async def verify_alerts(alerts: List[Alert], request: Request):
    """Verify several alerts; results keep the request order"""
    if len(alerts) > settings.max_batch_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Batch too large: {len(alerts)} alerts (max {settings.max_batch_size})"
        )
    results = await get_engine(request).verify_batch(alerts)
    metrics.record(results)
    return results


@app.post("/stats", response_model=VerificationStats)
async def verification_stats(results: List[VerificationResult]):
    """Summarize a set of verification results"""
    return compute_verification_stats(results)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        log_level=settings.log_level.lower()
    )
