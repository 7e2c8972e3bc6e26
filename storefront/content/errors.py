"""Uniform error shape for content store failures."""
from typing import Any, Dict, Optional
import httpx
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class ContentStoreError(Exception):
    """A failed read against the content store."""
    
    def __init__(self, message: str, details: Optional[str] = None, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.details = details
        self.status_code = status_code
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code
        }
    
    def __repr__(self):
        return f"<ContentStoreError(status_code={self.status_code}, message='{self.message}')>"


def _error_description(response: httpx.Response) -> Optional[str]:
    """Pull the store's own error description out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("description") or error.get("message")
    if isinstance(error, str):
        return error
    return None


def handle_content_error(error: Exception) -> ContentStoreError:
    """
    Wrap any failure raised while reading from the content store.
    
    Args:
        error: The original exception
        
    Returns:
        ContentStoreError carrying message, details and status code
    """
    if isinstance(error, ContentStoreError):
        return error
    
    logger.error(f"Content store error: {error!r}")
    
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        message = _error_description(response) or f"Content store responded with {response.status_code}"
        return ContentStoreError(
            message=message,
            details=response.text[:1000] or None,
            status_code=response.status_code
        )
    
    return ContentStoreError(
        message=str(error) or "An unknown error occurred",
        details=repr(error),
        status_code=500
    )
