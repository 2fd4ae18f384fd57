"""
Tests for the HTTP API
"""

import pytest

from barrels.config.base import settings
from barrels.models.assessment import SessionStatus

from conftest import make_session

JSON_HEADERS = {"Content-Type": "application/json"}


def put_session(client, session):
    return client.put(f"/api/sessions/{session.session_id}", content=session.model_dump_json(), headers=JSON_HEADERS)


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": settings.APP_NAME, "version": settings.VERSION}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "scoring_config_version" in data


def test_analyze_swing(client, canonical_swing):
    response = client.post("/api/swings/analyze", content=canonical_swing.model_dump_json(), headers=JSON_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["sequence_order"] == ["pelvis", "torso", "arm", "bat"]
    assert data["sequence_score"] == pytest.approx(100.0)


def test_analyze_swing_without_frames(client):
    response = client.post("/api/swings/analyze", json={"swing_id": "empty", "frames": []})
    assert response.status_code == 422
    assert "no frames" in response.json()["detail"]


def test_analyze_swing_with_bad_impact_frame(client, canonical_swing):
    payload = canonical_swing.model_dump(mode="json")
    payload["impact_frame"] = 500
    assert client.post("/api/swings/analyze", json=payload).status_code == 422


def test_barrel_endpoint(client):
    response = client.post("/api/barrels", json={"exit_velocity": 92, "launch_angle": 28, "level": "hs"})
    assert response.status_code == 200
    data = response.json()
    assert data["is_barrel"] is True
    assert data["angle_window"] == {"min": 26.0, "max": 30.0}


def test_contact_quality_endpoint(client, sample_events):
    payload = {"events": [e.model_dump() for e in sample_events], "level": "hs"}
    response = client.post("/api/contact-quality", json=payload)
    assert response.status_code == 200
    assert response.json()["barrels"] == 2


def test_session_lifecycle(client, store):
    session = make_session("session-1")
    assert put_session(client, session).status_code == 200
    assert store.get_session("session-1") is not None

    response = client.get("/api/sessions/session-1")
    assert response.status_code == 200
    assert response.json()["athlete_id"] == "athlete-1"

    response = client.post("/api/sessions/session-1/report")
    assert response.status_code == 200
    assert response.json()["swings_analyzed"] == 2
    assert store.get_session("session-1").status == SessionStatus.COMPLETED

    response = client.get("/api/sessions/session-1/report")
    assert response.status_code == 200
    assert response.json()["session_id"] == "session-1"


def test_session_id_mismatch(client):
    session = make_session("session-1")
    response = client.put("/api/sessions/other", content=session.model_dump_json(), headers=JSON_HEADERS)
    assert response.status_code == 400


def test_unknown_session(client):
    assert client.get("/api/sessions/missing").status_code == 404
    assert client.post("/api/sessions/missing/report").status_code == 404
    assert client.get("/api/sessions/missing/report").status_code == 404


def test_report_for_session_without_swings(client, store):
    put_session(client, make_session("session-1", swings=[]))
    response = client.post("/api/sessions/session-1/report")
    assert response.status_code == 422
    assert store.get_session("session-1").status == SessionStatus.FAILED


def test_hittrax_import(client, store):
    put_session(client, make_session("session-1", swings=[]))
    csv_text = "Row,Velo,LA,Res\n1,92,28,LD\n2,70,45,Foul\n"

    response = client.post("/api/sessions/session-1/ball-data/hittrax", content=csv_text)
    assert response.status_code == 200
    assert response.json() == {"session_id": "session-1", "imported": 2, "total_events": 2}

    client.post("/api/sessions/session-1/ball-data/hittrax", content=csv_text)
    assert len(store.get_session("session-1").ball_events) == 4

    response = client.post("/api/sessions/session-1/ball-data/hittrax?replace=true", content=csv_text)
    assert response.json()["total_events"] == 2


def test_hittrax_import_errors(client):
    assert client.post("/api/sessions/missing/ball-data/hittrax", content="Row,Velo\n1,90\n").status_code == 404
    put_session(client, make_session("session-1", swings=[]))
    assert client.post("/api/sessions/session-1/ball-data/hittrax", content="Row,Velo\n").status_code == 400
    assert client.post("/api/sessions/session-1/ball-data/hittrax", content=b"\xff\xfe\x00").status_code == 400


def test_comparison_endpoint(client):
    put_session(client, make_session("older", days_ago=7))
    client.post("/api/sessions/older/report")
    put_session(client, make_session("current"))
    client.post("/api/sessions/current/report")

    response = client.get("/api/athletes/athlete-1/sessions/current/comparison")
    assert response.status_code == 200
    data = response.json()
    assert data["previous_session_id"] == "older"
    assert data["days_since_previous"] == 7
    assert data["overall_trend"] == "stable"


def test_comparison_without_previous_is_null(client):
    put_session(client, make_session("current"))
    client.post("/api/sessions/current/report")
    response = client.get("/api/athletes/athlete-1/sessions/current/comparison")
    assert response.status_code == 200
    assert response.json() is None


def test_comparison_errors(client):
    assert client.get("/api/athletes/athlete-1/sessions/missing/comparison").status_code == 404
    put_session(client, make_session("current"))
    assert client.get("/api/athletes/athlete-1/sessions/current/comparison").status_code == 404
    assert client.get("/api/athletes/athlete-2/sessions/current/comparison").status_code == 404
