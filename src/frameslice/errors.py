"""
Pipeline Errors
===============

Fixed set of failures a slice invocation can end with.

Every error is terminal for the invocation that raised it. Nothing is
retried internally; the caller receives exactly one error message and
owns any retry decision.

Each class carries the HTTP status the service layer responds with.
"""


class SlicePipelineError(Exception):
    """Base class for all slice pipeline failures."""

    status_code: int = 500


class InvalidBodyRegionError(SlicePipelineError):
    """Header and footer bands leave no body region to slice."""

    status_code = 400


class NoValidManualSlicesError(SlicePipelineError):
    """Every manual rectangle was degenerate after normalization."""

    status_code = 400


class UnreadableSourceImageError(SlicePipelineError):
    """Export bytes could not be decoded into an image with dimensions."""

    status_code = 400


class CredentialNotFoundError(SlicePipelineError):
    """No matching or default account credential is configured."""

    status_code = 500


class ExtractionFailedError(SlicePipelineError):
    """A pixel region could not be extracted from the source image."""


class CompressionFailedError(SlicePipelineError):
    """The codec failed to encode a slice."""


class UploadFailedError(SlicePipelineError):
    """The image API rejected the upload or returned a malformed response."""

    status_code = 502
