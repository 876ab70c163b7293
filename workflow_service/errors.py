"""
Error taxonomy for the workflow service.
Business errors are terminal and never retried; StoreUnavailable is the only
transient failure and is kept apart from the business codes.
"""


class WorkflowError(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.message, "error_code": self.error_code}


class InvalidArgument(WorkflowError):
    status_code = 400
    error_code = "INVALID_ARGUMENT"


class Forbidden(WorkflowError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFound(WorkflowError):
    status_code = 404
    error_code = "NOT_FOUND"


class Conflict(WorkflowError):
    status_code = 409
    error_code = "CONFLICT"


class InvalidTransition(WorkflowError):
    status_code = 422
    error_code = "INVALID_TRANSITION"


class StoreUnavailable(WorkflowError):
    status_code = 503
    error_code = "STORE_UNAVAILABLE"
