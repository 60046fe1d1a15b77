"""
Base analyzer class and file metadata.

Defines the interface analyzers implement, plus the file validation and
loading steps shared by every analyzer that works on files on disk.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import magic

from ..utils.exceptions import (
    AnalysisError,
    EmptyInputError,
    FileTooLargeError,
    ReadError,
    UnsupportedFileError,
)
from ..utils.helpers import format_bytes, has_allowed_extension
from ..utils.logger import get_logger

logger = get_logger("analyzer")


@dataclass
class FileInfo:
    """Basic file information."""

    filename: str
    file_path: str
    file_size: int
    file_type: str
    mime_type: str
    modified: Optional[datetime] = None

    @classmethod
    def from_path(cls, file_path: Path) -> FileInfo:
        """Create FileInfo from file path."""
        stats = file_path.stat()

        try:
            file_type = magic.from_file(str(file_path))
            mime_type = magic.from_file(str(file_path), mime=True)
        except Exception as e:
            logger.debug(f"libmagic could not identify {file_path.name}: {e}")
            file_type = "Unknown"
            mime_type = "application/octet-stream"

        return cls(
            filename=file_path.name,
            file_path=str(file_path.absolute()),
            file_size=stats.st_size,
            file_type=file_type,
            mime_type=mime_type,
            modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "file_size_formatted": format_bytes(self.file_size),
            "file_type": self.file_type,
            "mime_type": self.mime_type,
            "modified": self.modified.isoformat() if self.modified else None,
        }


class BaseAnalyzer(ABC):
    """
    Abstract base class for all analyzers.

    Provides file validation, loading and logging helpers.
    """

    def __init__(
        self,
        max_file_size: int = 100 * 1024 * 1024,
        allowed_extensions: Optional[Iterable[str]] = None,
    ):
        """
        Initialize analyzer.

        Args:
            max_file_size: Maximum file size to analyze in bytes
            allowed_extensions: File name suffixes accepted by validate_file;
                None accepts any name
        """
        self.max_file_size = max_file_size
        self.allowed_extensions = tuple(allowed_extensions) if allowed_extensions else None
        self._logger = get_logger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Analyzer name for logging and display."""
        raise NotImplementedError("Subclass must implement 'name' property")

    def validate_file(self, file_path: Path) -> FileInfo:
        """
        Validate file before analysis.

        Args:
            file_path: Path to file

        Returns:
            FileInfo object

        Raises:
            AnalysisError: If the file is missing, not a regular file, empty,
                too large or has a disallowed extension
        """
        if not file_path.exists():
            raise AnalysisError(
                f"File not found: {file_path}",
                file_path=str(file_path),
            )

        if not file_path.is_file():
            raise AnalysisError(
                f"Not a regular file: {file_path}",
                file_path=str(file_path),
            )

        if self.allowed_extensions and not has_allowed_extension(file_path, self.allowed_extensions):
            raise UnsupportedFileError(str(file_path), self.allowed_extensions)

        file_info = FileInfo.from_path(file_path)

        if file_info.file_size > self.max_file_size:
            raise FileTooLargeError(
                str(file_path),
                file_info.file_size,
                self.max_file_size,
            )

        if file_info.file_size == 0:
            raise EmptyInputError(str(file_path))

        return file_info

    @abstractmethod
    def analyze(self, file_path: Path, data: Optional[bytes] = None) -> Any:
        """
        Perform analysis on file.

        Args:
            file_path: Path to file
            data: Optional pre-loaded file data

        Returns:
            Analysis result specific to this analyzer
        """
        raise NotImplementedError("Subclass must implement 'analyze' method")

    def _load_file(self, file_path: Path) -> bytes:
        """
        Load file data.

        Raises:
            ReadError: If the file cannot be read
        """
        try:
            with open(file_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ReadError(f"Error reading file: {e}", file_path=str(file_path)) from e

    def _log_start(self, file_path: Path) -> None:
        self._logger.info(
            f"Starting {self.name} analysis",
            extra_data={"file": str(file_path)},
        )

    def _log_complete(self, file_path: Path, duration: float) -> None:
        self._logger.info(
            f"Completed {self.name} analysis",
            extra_data={
                "file": str(file_path),
                "duration": f"{duration:.2f}s",
            },
        )

    def _log_error(self, file_path: Path, error: Exception) -> None:
        self._logger.error(
            f"{self.name} analysis failed",
            extra_data={
                "file": str(file_path),
                "error": str(error),
            },
        )
