"""
scopedfs Exception Hierarchy

Errors raised by the storage backends are the builtin ``OSError`` family
(``FileNotFoundError``, ``FileExistsError``, ``NotADirectoryError`` ...) and are
propagated to callers unchanged. The classes in this module cover the errors
scopedfs raises on its own behalf, such as invalid configuration.
"""

import time
from typing import Any, Dict, Optional


class ScopedFsError(Exception):
    """
    Base exception class for all scopedfs errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        timestamp: When the error occurred
        context: Additional context information
        user_message: User-friendly error message
        developer_message: Detailed technical error message
        suggestion: Suggested fix or next steps (if applicable)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SCOPEDFS_ERROR",
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """
        Initialize the error with context.

        Args:
            message: Technical error message for developers
            error_code: Unique error code for programmatic handling
            context: Additional context information
            user_message: User-friendly error message
            suggestion: Suggested fix or next steps
        """
        super().__init__(message)
        self.error_code = error_code
        self.timestamp = time.time()
        self.context = context or {}
        self.user_message = user_message or message
        self.developer_message = message
        self.suggestion = suggestion

    @property
    def message(self) -> str:
        return self.developer_message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.developer_message,
            "user_message": self.user_message,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        return f"[{self.error_code}] {self.developer_message}"


class ConfigurationError(ScopedFsError):
    """
    Raised when scopedfs is configured with an unusable value.

    Examples:
    - Unknown path flavor (not native, posix or windows)
    - Unknown backend name
    - Unknown logging level name
    """

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        value: Optional[Any] = None,
        valid_values: Optional[list] = None,
        **kwargs
    ):
        self.setting = setting
        self.value = value
        self.valid_values = valid_values

        context = kwargs.pop("context", {})
        if setting:
            context["setting"] = setting
        if value is not None:
            context["value"] = repr(value)
        if valid_values:
            context["valid_values"] = valid_values

        suggestion = kwargs.pop("suggestion", None)
        if suggestion is None and valid_values:
            suggestion = f"Use one of: {', '.join(str(v) for v in valid_values)}"

        super().__init__(
            message,
            error_code="CONFIGURATION_ERROR",
            context=context,
            user_message=kwargs.pop("user_message", "scopedfs is misconfigured."),
            suggestion=suggestion,
            **kwargs
        )
