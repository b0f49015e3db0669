"""Custom exceptions for task verification functionality."""


class VerificationError(Exception):
    """Base exception for task verification errors."""

    pass


class ImageDecodeError(VerificationError):
    """Exception raised when a proof image cannot be decoded."""

    pass


class ImageAnalysisError(VerificationError):
    """Exception raised when an image sub-analysis fails."""

    pass


class LexicalAnalysisError(VerificationError):
    """Exception raised for task text analysis errors."""

    pass


class TaggerUnavailableError(LexicalAnalysisError):
    """Exception raised when part-of-speech tagging resources are missing."""

    pass
