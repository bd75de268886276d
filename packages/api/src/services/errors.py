# This project was developed with assistance from AI tools.
"""Case-management error taxonomy.

Services raise these; ``src.main`` renders them as RFC 7807 Problem Details
using each class's ``status_code`` and ``code``.
"""


class CaseError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = "case_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(CaseError):
    """Request is well-formed but violates a business rule."""

    status_code = 422
    code = "validation_error"


class InvalidDocumentKind(ValidationError):
    """Document kind is not one the registry knows about."""

    code = "invalid_document_kind"

    def __init__(self, kind: str):
        super().__init__(f"Unknown document kind: {kind!r}")
        self.kind = kind


class NotFoundError(CaseError):
    status_code = 404
    code = "not_found"


class ConflictError(CaseError):
    status_code = 409
    code = "conflict"


class InvalidTransitionError(ConflictError):
    """Raised when an applicant status transition is not allowed."""

    code = "invalid_transition"


class TransientStoreError(CaseError):
    """Lock timeout, deadlock or serialization failure that outlived retries."""

    status_code = 503
    code = "transient_store_error"


class StorageError(CaseError):
    """Non-retryable persistence failure."""

    status_code = 500
    code = "storage_error"
