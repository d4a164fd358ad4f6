"""
StageVault error taxonomy.

Every failure is recovered locally: the API answers with a status the
client can act on, and nothing is retried on the server.
"""

from __future__ import annotations


class StageVaultError(Exception):
    """Base class for application errors."""

    pass


class NotFound(StageVaultError):
    """Requested document, person or theatre does not exist."""

    LABELS = {
        "recordings": "Recording",
        "people": "Person",
        "theatres": "Theatre",
        "users": "User",
    }

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id
        self.message = f"{self.LABELS.get(collection, 'Document')} not found."


class ValidationFailed(StageVaultError):
    """Input rejected before anything was written."""

    pass


class WriteFailure(StageVaultError):
    """The document store rejected a write. No rollback is attempted."""

    def __init__(self, operation: str, collection: str, cause: Exception | None = None) -> None:
        super().__init__(f"{operation} on {collection} failed: {cause}")
        self.operation = operation
        self.collection = collection
        self.cause = cause


class UploadFailure(StageVaultError):
    """A single image upload failed. Other files in the batch are unaffected."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(f"{filename}: {message}")
        self.filename = filename
        self.message = message


class StorageFailure(StageVaultError):
    """The image store rejected an operation other than an upload."""

    def __init__(self, operation: str, key: str, message: str) -> None:
        super().__init__(f"{operation} of {key} failed: {message}")
        self.operation = operation
        self.key = key
        self.message = message


class UnauthorizedAccess(StageVaultError):
    """Caller has no principal, no role, or too low a role."""

    def __init__(self, message: str = "Not authenticated.", status_code: int = 401) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
