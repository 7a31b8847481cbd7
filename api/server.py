"""
Progress Gantt API Server - REST surface over the Gantt controller.
"""
# ruff: noqa: S104
# S104: Development server binding (guarded by __name__ check)

import logging
import os
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.gantt_router import gantt_router, get_controller
from api.response_models import HealthResponse
from gantt import config
from gantt.observability import CorrelationIdMiddleware, configure_log_file, configure_logging

logger = logging.getLogger(__name__)

# FastAPI app initialization
app = FastAPI(
    title="Progress Gantt API",
    description="Timeline grid, hierarchy, bar geometry and viewport state for the progress Gantt view",
    version="1.0.0",
)

# CORS middleware - configurable via CORS_ORIGINS env var
# Dev default: allow all origins; Production: set CORS_ORIGINS to comma-separated list
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
cors_origins = (
    ["*"] if cors_origins_env == "*" else [o.strip() for o in cors_origins_env.split(",")]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(gantt_router)


# ==== Startup ====
@app.on_event("startup")
async def load_work_items_on_startup():
    """Load projects/issues/tasks and build the first grid."""
    controller = get_controller()
    logger.info("=== Progress Gantt Startup ===")
    if await controller.load():
        logger.info(
            "Timeline built: %s .. %s",
            controller.timeline.start.isoformat(),
            controller.timeline.end.isoformat(),
        )
    else:
        logger.warning("Initial load failed: %s", controller.load_error)


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint. Degraded while the last load failed."""
    controller = get_controller()
    return {
        "status": "degraded" if controller.load_error else "healthy",
        "timestamp": datetime.now().isoformat(),
        "load_error": controller.load_error,
    }


def main():
    """Run the server."""
    configure_logging(level=config.LOG_LEVEL)
    configure_log_file(config.LOG_FILE)
    port = int(os.environ.get("PORT", 8420))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
