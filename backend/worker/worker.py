"""
Celery worker for background report generation
"""

from datetime import datetime, timezone
from typing import Dict

from celery import Celery

from barrels.config.base import settings
from barrels.services.report_generator import process_session
from barrels.services.storage import get_store
from barrels.utils.logger import get_logger

logger = get_logger(__name__)

# Create Celery app
celery_app = Celery(
    "barrels-worker",
    broker=settings.BROKER_URL,
    backend=settings.RESULT_BACKEND
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=settings.REPORT_TIMEOUT,
    task_soft_time_limit=max(1, settings.REPORT_TIMEOUT - 30),
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
)


@celery_app.task(bind=True)
def generate_report_task(self, session_id: str) -> Dict:
    """
    Background task for (re)generating a session report

    One generation per task; the store serializes concurrent upserts.

    Args:
        session_id: Session whose swings and ball data should be scored

    Returns:
        Dict summarizing the generated report
    """
    try:
        logger.info(f"Starting report generation task for session {session_id}")

        self.update_state(
            state="PROCESSING",
            meta={"status": "Generating report", "session_id": session_id}
        )

        report = process_session(session_id, get_store())

        logger.info(f"Completed report generation task for session {session_id}")
        return {
            "session_id": session_id,
            "status": "completed",
            "overall_score": report.overall_score,
            "tier": report.tier,
            "swings_analyzed": report.swings_analyzed,
            "swings_excluded": report.swings_excluded,
        }

    except Exception as e:
        logger.error(f"Error in report generation task {session_id}: {str(e)}")

        self.update_state(
            state="FAILURE",
            meta={"status": f"Report generation failed: {str(e)}", "session_id": session_id}
        )
        raise


@celery_app.task
def health_check_task() -> Dict:
    """Health check task for worker monitoring"""
    return {
        "status": "healthy",
        "worker": "barrels-worker",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Task routing
celery_app.conf.task_routes = {
    "worker.worker.generate_report_task": {"queue": "reports"},
    "worker.worker.health_check_task": {"queue": "health"},
}

if __name__ == "__main__":
    celery_app.start()
