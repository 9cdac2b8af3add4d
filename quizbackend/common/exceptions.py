"""
Common Exception Classes

This module defines custom exceptions used throughout the quiz backend.

Remote store failures are split by cause so callers that collapse them into
a boolean can still log and test the distinct reasons:

- StoreUnavailableError: the store could not be reached or timed out
- StoreResponseError: the store answered with a non-success status
- StorePayloadError: the store answered with something we cannot decode
"""

from typing import Optional


class BaseError(Exception):
    """Base class for all custom exceptions."""
    
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.
        
        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class ConfigurationError(BaseError):
    """Exception raised for configuration-related errors."""
    
    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key


class StoreError(BaseError):
    """Base exception for failures talking to the remote record store."""
    
    def __init__(
        self,
        message: str,
        operation: str = "",
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize the store error.
        
        Args:
            message: Error message
            operation: Store operation that failed (e.g. "fetch_one")
            original_exception: Underlying client or decoding exception
        """
        prefix = f"[{operation}] " if operation else ""
        super().__init__(f"{prefix}{message}", original_exception)
        self.operation = operation


class StoreUnavailableError(StoreError):
    """The store was unreachable or the request timed out."""


class StoreResponseError(StoreError):
    """The store returned a non-success HTTP status."""
    
    def __init__(
        self,
        message: str,
        status_code: int,
        operation: str = "",
        body: Optional[str] = None
    ):
        super().__init__(f"{message} (status {status_code})", operation)
        self.status_code = status_code
        self.body = body


class StorePayloadError(StoreError):
    """The store returned a payload that could not be decoded."""
