"""
Exception types raised by the assessment engine
"""


class AssessmentError(Exception):
    """Base class for assessment engine errors"""


class MissingDataError(AssessmentError):
    """A swing has no frames or no usable keypoints for a required computation"""


class EmptySessionError(AssessmentError):
    """A session has no swings to aggregate"""


class SessionNotFoundError(AssessmentError):
    """No stored session for the requested id"""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id

