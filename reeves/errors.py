"""
Exception hierarchy for the Reeves service.

Every error raised at a store, upload or network boundary derives from
ReevesError so HTTP surfaces can render it as structured JSON.
"""

from typing import Optional


class ReevesError(Exception):
    """Base exception for all Reeves errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: str = "REEVES_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class StoreError(ReevesError):
    """The document store failed to answer a query or write."""

    status_code = 503

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="STORE_ERROR", **kwargs)


class ItemNotFoundError(ReevesError):
    status_code = 404

    def __init__(self, collection: str, item_id: str):
        super().__init__(
            message=f"No {collection} item with id {item_id}",
            error_code="ITEM_NOT_FOUND",
            details={"collection": collection, "id": item_id},
        )


class InvalidCursorError(ReevesError):
    status_code = 400

    def __init__(self, token: str):
        super().__init__(
            message="Pagination cursor is malformed",
            error_code="INVALID_CURSOR",
            details={"cursor": token},
        )


class UploadError(ReevesError):
    """The media host rejected or failed an upload."""

    status_code = 502

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="UPLOAD_FAILED", **kwargs)


class RequestTimeoutError(ReevesError):
    status_code = 504

    def __init__(self, url: str, timeout: float):
        super().__init__(
            message="Request timeout",
            error_code="REQUEST_TIMEOUT",
            details={"url": url, "timeout": timeout},
        )
