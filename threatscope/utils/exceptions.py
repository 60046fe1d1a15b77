"""
Custom exceptions for the ThreatScope PE analyzer.

Every error raised by the analyzer derives from ThreatScopeError so that
callers (CLI, dashboard backend) can report failures uniformly.
"""

from typing import Optional


class ThreatScopeError(Exception):
    """Base exception for all ThreatScope errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "UNKNOWN_ERROR"
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ThreatScopeError):
    """Raised when there is a configuration-related error."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message,
            code="CONFIG_ERROR",
            details={"config_key": config_key} if config_key else {},
        )


class AnalysisError(ThreatScopeError):
    """Raised when an analysis run cannot produce a result."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        analysis_type: Optional[str] = None,
    ):
        super().__init__(
            message,
            code="ANALYSIS_ERROR",
            details={
                "file_path": file_path,
                "analysis_type": analysis_type,
            },
        )


class ReadError(AnalysisError):
    """Raised when the byte source could not be fully read."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, file_path, "read")
        self.code = "READ_ERROR"


class EmptyInputError(AnalysisError):
    """Raised when there are no bytes to analyze."""

    def __init__(self, file_path: Optional[str] = None):
        super().__init__("Input is empty, nothing to analyze", file_path, "read")
        self.code = "EMPTY_INPUT"


class NoCandidatesError(AnalysisError):
    """Raised when no DLL-like strings survive name filtering."""

    def __init__(self, file_path: Optional[str] = None, strings_scanned: int = 0):
        super().__init__(
            "Could not find any strings ending in '.dll' to analyze.",
            file_path,
            "dll_classification",
        )
        self.code = "NO_CANDIDATES"
        self.details["strings_scanned"] = strings_scanned


class FileTooLargeError(AnalysisError):
    """Raised when a file exceeds the maximum allowed size."""

    def __init__(
        self,
        file_path: str,
        file_size: int,
        max_size: int,
    ):
        message = f"File size ({file_size:,} bytes) exceeds maximum ({max_size:,} bytes)"
        super().__init__(message, file_path, "size_check")
        self.code = "FILE_TOO_LARGE"
        self.details.update({
            "file_size": file_size,
            "max_size": max_size,
        })


class UnsupportedFileError(AnalysisError):
    """Raised when a file's extension is not on the allow-list."""

    def __init__(self, file_path: str, allowed: tuple):
        super().__init__(
            f"Please select a valid {' or '.join(allowed)} file.",
            file_path,
            "format_detection",
        )
        self.code = "UNSUPPORTED_FILE"
        self.details["allowed_extensions"] = list(allowed)
