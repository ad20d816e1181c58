class ServiceError(Exception):
    def __init__(self, code="SERVICE_ERROR", message="Service error", details=None, status=400):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status = status
        super().__init__(message)


class NotFoundError(ServiceError):
    def __init__(self, message="Resource not found", details=None):
        super().__init__("NOT_FOUND", message, details, status=404)


class ValidationFailed(ServiceError):
    """Field-level validation failure; ``fields`` maps field name -> messages."""

    def __init__(self, fields, message="Validation failed"):
        super().__init__("VALIDATION_ERROR", message, {"fields": fields}, status=422)
        self.fields = fields
