"""
FastAPI Entry Point for the Barrels swing assessment API
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from barrels.config.base import settings
from barrels.routers.assessments import router as assessments_router
from barrels.services.storage import get_store
from barrels.utils.logger import get_logger, setup_logging
from barrels.utils.scoring_configs import SCORING_CONFIG_VERSION

setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = get_logger(__name__)
logger.info("Starting Barrels API initialization...")

app = FastAPI(
    title=settings.APP_NAME,
    description="Swing assessment from pose keypoints and ball-flight data",
    version=settings.VERSION
)

if settings.DEBUG:
    # Development: Allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[f"http://{host}" for host in settings.ALLOWED_HOSTS]
        + [f"https://{host}" for host in settings.ALLOWED_HOSTS],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

app.include_router(assessments_router)
logger.info("Assessments router included")


@app.get("/")
async def root():
    return {"message": settings.APP_NAME, "version": settings.VERSION}


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "scoring_config_version": SCORING_CONFIG_VERSION,
        "services": {
            "storage": type(get_store()).__name__,
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
