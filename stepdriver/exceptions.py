# stepdriver/exceptions.py
"""
@file exceptions.py
@brief Exception taxonomy for locating elements and executing steps.
"""

from __future__ import annotations

import traceback
from typing import Any, Dict, Optional


class StepDriverError(Exception):
    """Base exception for the framework."""
    pass


class ConfigurationError(StepDriverError):
    """
    Raised for a malformed step list or invalid settings.

    Never retried: an unknown action name/arity or a broken settings file
    terminates the run before (or instead of) executing further steps.
    """
    pass


class TimeoutError(StepDriverError):
    """
    Raised when a bounded wait runs out of time.

    Attributes:
        original_exception: The last exception raised before the deadline
        description: What was being waited for
        timeout: The timeout value in seconds
        attempt_count: Number of attempts made
        elapsed_time: Actual elapsed time in seconds
        stage: Optional phase label
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.original_exception: Optional[BaseException] = None
        self.description: Optional[str] = None
        self.timeout: Optional[float] = None
        self.attempt_count: Optional[int] = None
        self.elapsed_time: Optional[float] = None
        self.stage: Optional[str] = None

    def __str__(self) -> str:
        base_msg = super().__str__()
        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")
        if self.stage is not None:
            details.append(f"Stage: {self.stage}")
        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg


class ElementNotFoundError(StepDriverError):
    """Raised when a locator matched nothing and the caller required a match."""

    def __init__(self, locator: str, timeout: Optional[float] = None, reason: Optional[str] = None):
        self.locator = locator
        self.timeout = timeout
        self.reason = reason
        super().__init__(self.__str__())

    def __str__(self) -> str:
        msg = f"ElementNotFoundError: locator={self.locator}"
        if self.timeout is not None:
            msg += f" timeout={self.timeout}s"
        if self.reason:
            msg += f" reason='{self.reason}'"
        return msg


class CapabilityUnsupportedError(StepDriverError):
    """
    Raised when an operation needs a capability the element variant lacks.

    Region-only elements (image, OCR and location results) have no native
    tree handle, so toggling, name/id introspection and focus fail here.
    """

    def __init__(self, capability: str, variant: str):
        self.capability = capability
        self.variant = variant
        super().__init__(f"{variant} does not support capability '{capability}'")


class BackendError(StepDriverError):
    """Raised when a native backend call fails (UIA, capture, OCR engine)."""

    def __init__(self, backend: str, details: str, cause: Optional[BaseException] = None):
        self.backend = backend
        self.details = details
        self.cause = cause
        msg = f"BackendError: backend='{backend}' details='{details}'"
        if cause is not None:
            msg += f" cause='{type(cause).__name__}: {cause}'"
        super().__init__(msg)


class ImageSearchError(StepDriverError):
    """Base for visual search misses that carry the image involved."""

    def __init__(self, image: str, message: str):
        self.image = image
        super().__init__(message)


class SearchRegionNotFoundError(ImageSearchError):
    """The search region image could not be located on screen."""

    def __init__(self, image: str):
        super().__init__(image, f"search region '{image}' not found on screen")


class TargetNotFoundError(ImageSearchError):
    """The target template could not be located inside the search area."""

    def __init__(self, image: str, within: str = "SCREEN"):
        self.within = within
        super().__init__(image, f"target '{image}' not found inside '{within}'")


class TextNotFoundError(StepDriverError):
    """Recognized text did not contain the requested phrase."""

    def __init__(self, text: str, within: str = "SCREEN"):
        self.text = text
        self.within = within
        super().__init__(f"text '{text}' not found inside '{within}'")


class LocationError(StepDriverError):
    """Raised for a malformed or off-screen ByLocation point."""
    pass


class ActionError(StepDriverError):
    """
    Raised when a step handler cannot carry out its action.

    Contains the action name, target description and the underlying cause.
    """

    def __init__(
        self,
        action: str,
        target: Optional[str] = None,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.action = action
        self.target = target
        self.details = details
        self.cause = cause
        self.metadata = metadata or {}
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"ActionError: action='{self.action}'"
        if self.target:
            base += f" target='{self.target}'"
        if self.details:
            base += f" details='{self.details}'"
        if self.cause:
            base += f" cause='{type(self.cause).__name__}: {self.cause}'"
        return base

    def get_cause_traceback(self) -> str:
        """
        Get a formatted traceback string from the cause exception.

        @return Formatted traceback string or empty string if no cause
        """
        if self.cause is None:
            return ""
        return "".join(traceback.format_exception(
            type(self.cause),
            self.cause,
            self.cause.__traceback__,
        ))
