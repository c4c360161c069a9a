"""Error taxonomy for the capture and compare pipeline."""

from __future__ import annotations


class VisualifyError(Exception):
    """Base class for all pipeline errors."""


class SetupError(VisualifyError):
    """Invalid input or output location, reported before any work starts."""


class CaptureError(VisualifyError):
    """Navigation or screenshot failure for a capture target."""


class MaxRetriesReached(CaptureError):
    """A (path, domain) capture sequence failed on every attempt."""

    def __init__(self, path_key: str, domain_label: str, attempts: int, last_error: BaseException | None):
        self.path_key = path_key
        self.domain_label = domain_label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Max retries reached for path '{path_key}' on {domain_label} "
            f"after {attempts} attempts: {last_error}"
        )


class ImageDecodeError(VisualifyError):
    """An image could not be read, or the diff primitive failed on it."""
