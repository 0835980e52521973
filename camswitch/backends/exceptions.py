"""
Exception classes for camswitch device sources and binders.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CamSwitchError(Exception):
    """Base exception class for all camswitch errors."""

    log_level = logging.ERROR

    def __init__(self, message: str, cause: Optional[Exception] = None, context: Optional[dict] = None):
        """
        Initialize camswitch error.

        Args:
            message: Error message
            cause: Original exception that caused this error
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context or {}

        # Log the error with context
        logger.log(self.log_level, f"{self.__class__.__name__}: {message}", extra={
            'cause': str(cause) if cause else None,
            'context': self.context
        })


class SourceUnavailableError(CamSwitchError):
    """Raised when one device source cannot be enumerated."""

    log_level = logging.WARNING

    def __init__(self, message: str, source: Optional[str] = None, cause: Optional[Exception] = None):
        context = {'source': source} if source else {}
        super().__init__(message, cause, context)

    @property
    def source(self) -> Optional[str]:
        return self.context.get('source')


class ActivationFailedError(CamSwitchError):
    """Raised when a binder rejects a supported device."""

    def __init__(self, message: str, device_id: Optional[str] = None, cause: Optional[Exception] = None):
        context = {'device_id': device_id} if device_id else {}
        super().__init__(message, cause, context)


class UnsupportedPlatformError(CamSwitchError):
    """Raised when the current platform is not supported."""

    def __init__(self, message: str, platform: Optional[str] = None):
        context = {'platform': platform} if platform else {}
        super().__init__(message, context=context)
