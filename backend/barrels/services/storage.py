"""
Session and report storage
Supports an in-process store (development, tests) and Redis
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import redis

from barrels.config.base import settings
from barrels.models.assessment import AssessmentReport, AssessmentSession
from barrels.utils.logger import LoggerMixin


class AssessmentStore(ABC):
    """Persistence for sessions and their reports; reports are upserted by session id"""

    @abstractmethod
    def save_session(self, session: AssessmentSession) -> bool:
        pass

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[AssessmentSession]:
        pass

    @abstractmethod
    def list_sessions(self, athlete_id: str) -> List[AssessmentSession]:
        pass

    @abstractmethod
    def save_report(self, report: AssessmentReport) -> bool:
        pass

    @abstractmethod
    def get_report(self, session_id: str) -> Optional[AssessmentReport]:
        pass


class InMemoryAssessmentStore(AssessmentStore, LoggerMixin):
    """Dictionary-backed store; copies on the way in and out so callers never share state"""

    def __init__(self):
        self._sessions: Dict[str, AssessmentSession] = {}
        self._reports: Dict[str, AssessmentReport] = {}

    def save_session(self, session: AssessmentSession) -> bool:
        self._sessions[session.session_id] = session.model_copy(deep=True)
        return True

    def get_session(self, session_id: str) -> Optional[AssessmentSession]:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    def list_sessions(self, athlete_id: str) -> List[AssessmentSession]:
        return [
            session.model_copy(deep=True)
            for session in self._sessions.values()
            if session.athlete_id == athlete_id
        ]

    def save_report(self, report: AssessmentReport) -> bool:
        replaced = report.session_id in self._reports
        self._reports[report.session_id] = report.model_copy(deep=True)
        self.logger.debug(f"{'Replaced' if replaced else 'Stored'} report for session {report.session_id}")
        return True

    def get_report(self, session_id: str) -> Optional[AssessmentReport]:
        report = self._reports.get(session_id)
        return report.model_copy(deep=True) if report else None


class RedisAssessmentStore(AssessmentStore, LoggerMixin):
    """Sessions and reports as JSON documents in Redis, plus a per-athlete session index"""

    def __init__(self, client: Optional[redis.Redis] = None, prefix: Optional[str] = None):
        self.redis_client = client or redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD or None,
            db=settings.REDIS_DB,
            decode_responses=True
        )
        self.prefix = prefix or settings.REDIS_KEY_PREFIX
        self.logger.info(f"Using Redis storage at {settings.REDIS_HOST}:{settings.REDIS_PORT}")

    def _session_key(self, session_id: str) -> str:
        return f"{self.prefix}:session:{session_id}"

    def _report_key(self, session_id: str) -> str:
        return f"{self.prefix}:report:{session_id}"

    def _athlete_key(self, athlete_id: str) -> str:
        return f"{self.prefix}:athlete:{athlete_id}:sessions"

    def _get_json(self, key: str) -> Optional[str]:
        try:
            return self.redis_client.get(key)
        except redis.RedisError as e:
            self.logger.error(f"Redis GET failed for key {key}: {str(e)}")
            return None

    def _set_json(self, key: str, value: str) -> bool:
        try:
            return bool(self.redis_client.set(key, value))
        except redis.RedisError as e:
            self.logger.error(f"Redis SET failed for key {key}: {str(e)}")
            return False

    def save_session(self, session: AssessmentSession) -> bool:
        if not self._set_json(self._session_key(session.session_id), session.model_dump_json()):
            return False
        try:
            self.redis_client.sadd(self._athlete_key(session.athlete_id), session.session_id)
        except redis.RedisError as e:
            self.logger.error(f"Redis SADD failed for athlete {session.athlete_id}: {str(e)}")
            return False
        return True

    def get_session(self, session_id: str) -> Optional[AssessmentSession]:
        value = self._get_json(self._session_key(session_id))
        return AssessmentSession.model_validate_json(value) if value else None

    def list_sessions(self, athlete_id: str) -> List[AssessmentSession]:
        try:
            session_ids = self.redis_client.smembers(self._athlete_key(athlete_id))
        except redis.RedisError as e:
            self.logger.error(f"Redis SMEMBERS failed for athlete {athlete_id}: {str(e)}")
            return []

        sessions = []
        for session_id in sorted(session_ids):
            session = self.get_session(session_id)
            if session is not None:
                sessions.append(session)
        return sessions

    def save_report(self, report: AssessmentReport) -> bool:
        # SET replaces, which gives upsert semantics
        return self._set_json(self._report_key(report.session_id), report.model_dump_json())

    def get_report(self, session_id: str) -> Optional[AssessmentReport]:
        value = self._get_json(self._report_key(session_id))
        if not value:
            return None
        try:
            return AssessmentReport.model_validate_json(value)
        except ValueError as e:
            self.logger.error(f"Stored report for session {session_id} is unreadable: {str(e)}")
            return None


_store: Optional[AssessmentStore] = None


def create_store(backend: Optional[str] = None) -> AssessmentStore:
    """Build the store selected by STORAGE_BACKEND"""
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "redis":
        return RedisAssessmentStore()
    if backend == "memory":
        return InMemoryAssessmentStore()
    raise ValueError(f"Unknown storage backend: {backend}")


def get_store() -> AssessmentStore:
    """Process-wide store, also used as a FastAPI dependency"""
    global _store
    if _store is None:
        _store = create_store()
    return _store
