"""Failure taxonomy shared by stores, services and routers.

Stores and services raise these; the generate/clone procedures catch them at
their boundary and hand back ``{"error": message}`` instead.
"""

class MockTestError(Exception):
    """Base class for every expected failure of the mock test service."""

class PoolEmpty(MockTestError):
    pass

class PaperNotFound(MockTestError):
    pass

class DuplicateAttempt(MockTestError):
    pass

class DuplicatePaper(DuplicateAttempt):
    """The paper store refused a second paper for the same (paper_code, user_id)."""

class PaperAlreadySubmitted(MockTestError):
    pass

class InvalidRequest(MockTestError):
    pass

class StoreUnavailable(MockTestError):
    pass

class QuestionNotFound(MockTestError):
    pass

class NotAllowed(MockTestError):
    pass
