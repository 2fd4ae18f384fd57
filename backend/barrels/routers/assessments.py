"""
Assessment API endpoints: swing analysis, barrels, contact quality, sessions and reports
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from barrels.analyzers.barrel_classifier import compute_is_barrel
from barrels.analyzers.contact_quality import compute_contact_quality_summary
from barrels.analyzers.swing_analyzer import analyze_swing
from barrels.models.assessment import AssessmentReport, AssessmentSession, ComparisonSummary
from barrels.models.ball import BarrelRequest, BarrelResult, ContactQualityRequest, ContactQualitySummary
from barrels.models.metrics import SwingMetrics
from barrels.models.pose import Swing
from barrels.services.ball_import import parse_hittrax_csv
from barrels.services.report_generator import process_session
from barrels.services.session_comparator import compare_assessments
from barrels.services.storage import AssessmentStore, get_store
from barrels.utils.errors import (
    EmptySessionError,
    MissingDataError,
    SessionNotFoundError,
)
from barrels.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Assessments"])


@router.post("/swings/analyze", response_model=SwingMetrics)
async def analyze_swing_endpoint(swing: Swing):
    """Analyze a single swing"""
    try:
        return analyze_swing(swing)
    except MissingDataError as e:
        logger.warning(f"Swing analysis rejected: {str(e)}")
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/barrels", response_model=BarrelResult)
async def classify_barrel(request: BarrelRequest):
    """Classify one batted ball"""
    return compute_is_barrel(
        request.exit_velocity,
        request.launch_angle,
        request.is_fair,
        request.level,
    )


@router.post("/contact-quality", response_model=ContactQualitySummary)
async def contact_quality(request: ContactQualityRequest):
    """Summarize a set of batted balls"""
    return compute_contact_quality_summary(request.events, request.level)


@router.put("/sessions/{session_id}", response_model=AssessmentSession)
async def save_session(
    session_id: str,
    session: AssessmentSession,
    store: AssessmentStore = Depends(get_store),
):
    """Create or replace a session"""
    if session.session_id != session_id:
        raise HTTPException(status_code=400, detail="Session id in path and body differ")
    if not store.save_session(session):
        raise HTTPException(status_code=503, detail="Failed to store session")
    logger.info(f"Stored session {session_id} for athlete {session.athlete_id} ({len(session.swings)} swings)")
    return session


@router.get("/sessions/{session_id}", response_model=AssessmentSession)
async def get_session(session_id: str, store: AssessmentStore = Depends(get_store)):
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/sessions/{session_id}/ball-data/hittrax")
async def import_hittrax(
    session_id: str,
    request: Request,
    replace: bool = False,
    store: AssessmentStore = Depends(get_store),
):
    """Import a HitTrax CSV export (raw text body) into a session's ball events"""
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")

    events = parse_hittrax_csv(text, level=session.level)
    if not events:
        raise HTTPException(status_code=400, detail="No data rows found in CSV")

    session.ball_events = events if replace else session.ball_events + events
    if not store.save_session(session):
        raise HTTPException(status_code=503, detail="Failed to store session")

    return {
        "session_id": session_id,
        "imported": len(events),
        "total_events": len(session.ball_events),
    }


@router.post("/sessions/{session_id}/report", response_model=AssessmentReport)
async def generate_report(session_id: str, store: AssessmentStore = Depends(get_store)):
    """Generate (or regenerate) the report for a session"""
    try:
        return process_session(session_id, store)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except EmptySessionError as e:
        logger.warning(f"Report generation failed: {str(e)}")
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/sessions/{session_id}/report", response_model=AssessmentReport)
async def get_report(session_id: str, store: AssessmentStore = Depends(get_store)):
    report = store.get_report(session_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get(
    "/athletes/{athlete_id}/sessions/{session_id}/comparison",
    response_model=Optional[ComparisonSummary],
)
async def get_comparison(athlete_id: str, session_id: str, store: AssessmentStore = Depends(get_store)):
    """Comparison with the athlete's previous assessment; null when there is none"""
    session = store.get_session(session_id)
    if session is None or session.athlete_id != athlete_id:
        raise HTTPException(status_code=404, detail="Session not found")
    if store.get_report(session_id) is None:
        raise HTTPException(status_code=404, detail="Report not found")

    return compare_assessments(athlete_id, session_id, store)
