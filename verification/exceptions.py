"""
Errors raised by the verification workflow.

Each error carries a stable code and the HTTP status the API answers with, so
the dashboard can show the specific reason ("this request was already decided")
instead of a generic failure.
"""


class TransitionError(Exception):
    code = "TRANSITION_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


class TaskNotFound(TransitionError):
    code = "NOT_FOUND"
    status_code = 404


class InvalidStateError(TransitionError):
    code = "INVALID_STATE"
    status_code = 409


class MappingError(TransitionError):
    """Unknown change-request field name: a defect in the field catalog."""

    code = "MAPPING_ERROR"
    status_code = 422


class MissingReasonError(TransitionError):
    code = "MISSING_REASON"
    status_code = 400


class SubmissionError(TransitionError):
    """A resident submission that cannot be accepted in the account's current state."""

    code = "SUBMISSION_REJECTED"
    status_code = 400
