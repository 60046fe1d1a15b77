"""
Static DLL-reference analysis of executables.

Runs the string extraction, readability filtering and DLL classification
stages over one file or buffer and reports progress through an optional
status callback.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from .base_analyzer import BaseAnalyzer, FileInfo
from .dll_classifier import AnalysisResult, DllClassifier, filter_dll_names
from .readability import ReadabilityFilter
from .string_extractor import DEFAULT_MIN_LENGTH, StringExtractor
from ..utils.config import get_config
from ..utils.exceptions import AnalysisError, EmptyInputError, NoCandidatesError
from ..utils.helpers import calculate_hash
from ..utils.logger import get_logger

logger = get_logger("dll_analyzer")


class StatusType(Enum):
    """Kind of status notification."""
    INFO = "info"
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class StatusUpdate:
    """Progress notification emitted while an analysis runs."""
    stage: str
    message: str
    type: StatusType


StatusCallback = Callable[[StatusUpdate], None]


@dataclass
class FileReport:
    """Analysis outcome for one file: metadata plus result or error."""

    file_path: str
    file_info: Optional[FileInfo] = None
    sha256: str = ""
    result: Optional[AnalysisResult] = None
    error: Optional[AnalysisError] = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "file_path": self.file_path,
            "file_info": self.file_info.to_dict() if self.file_info else None,
            "sha256": self.sha256 or None,
            "duration_seconds": round(self.duration_seconds, 4),
            "result": self.result.to_dict() if self.result else None,
            "categories": self.result.categories if self.result else [],
            "detections": [d.to_dict() for d in self.result.detections] if self.result else [],
            "error": self.error.to_dict() if self.error else None,
        }


class DllAnalyzer(BaseAnalyzer):
    """
    Flag suspicious DLL names referenced by an executable.

    The binary is treated as an opaque byte stream; no PE structures are
    parsed. Settings not passed explicitly come from the global config.
    """

    def __init__(
        self,
        min_length: Optional[int] = None,
        max_file_size: Optional[int] = None,
        allowed_extensions: Optional[Iterable[str]] = None,
        classifier: Optional[DllClassifier] = None,
        readability: Optional[ReadabilityFilter] = None,
    ):
        config = get_config()
        if max_file_size is None:
            max_file_size = config.get("analysis.max_file_size")
        if allowed_extensions is None:
            allowed_extensions = config.get("analysis.allowed_extensions")
        if min_length is None:
            min_length = config.get("analysis.min_string_length", DEFAULT_MIN_LENGTH)

        super().__init__(max_file_size=max_file_size, allowed_extensions=allowed_extensions)
        self.extractor = StringExtractor(min_length=min_length, readability=readability)
        self.classifier = classifier or DllClassifier()

    @property
    def name(self) -> str:
        return "DLL Analyzer"

    @property
    def min_length(self) -> int:
        return self.extractor.min_length

    def analyze_bytes(
        self,
        data: bytes,
        status_callback: Optional[StatusCallback] = None,
        file_path: Optional[str] = None,
    ) -> AnalysisResult:
        """Run the pipeline over an in-memory buffer with this analyzer's settings."""
        return analyze(
            data,
            status_callback=status_callback,
            extractor=self.extractor,
            classifier=self.classifier,
            file_path=file_path,
        )

    def analyze(
        self,
        file_path: Path,
        data: Optional[bytes] = None,
        status_callback: Optional[StatusCallback] = None,
    ) -> AnalysisResult:
        """
        Analyze a file on disk.

        Args:
            file_path: Path to file
            data: Optional pre-loaded data; skips validation and reading
            status_callback: Receives StatusUpdate notifications

        Raises:
            AnalysisError: On validation, read or classification failure
        """
        file_path = Path(file_path)
        self._log_start(file_path)
        start_time = time.time()

        try:
            if data is None:
                self.validate_file(file_path)
                _Notifier(status_callback)("read", "Reading file...", StatusType.LOADING)
                data = self._load_file(file_path)
            result = self.analyze_bytes(data, status_callback, file_path=str(file_path))
        except AnalysisError as e:
            self._log_error(file_path, e)
            raise

        self._log_complete(file_path, time.time() - start_time)
        return result

    def scan(
        self,
        file_path: Path,
        status_callback: Optional[StatusCallback] = None,
    ) -> FileReport:
        """
        Analyze a file and capture the outcome, failures included, in a FileReport.
        """
        file_path = Path(file_path)
        report = FileReport(file_path=str(file_path))
        start_time = time.time()

        try:
            report.file_info = self.validate_file(file_path)
            _Notifier(status_callback)("read", "Reading file...", StatusType.LOADING)
            data = self._load_file(file_path)
        except AnalysisError as e:
            self._log_error(file_path, e)
            report.error = e
        else:
            report.sha256 = calculate_hash(data)
            try:
                report.result = self.analyze(file_path, data=data, status_callback=status_callback)
            except AnalysisError as e:
                report.error = e

        report.duration_seconds = time.time() - start_time
        return report


class _Notifier:
    """Forward status updates to a callback without letting it break analysis."""

    def __init__(self, callback: Optional[StatusCallback]):
        self.callback = callback

    def __call__(self, stage: str, message: str, status_type: StatusType) -> None:
        if self.callback is None:
            return
        try:
            self.callback(StatusUpdate(stage, message, status_type))
        except Exception as e:
            logger.warning(f"Status callback failed: {e}", extra_data={"stage": stage})


def analyze(
    buffer: bytes,
    min_length: int = DEFAULT_MIN_LENGTH,
    status_callback: Optional[StatusCallback] = None,
    extractor: Optional[StringExtractor] = None,
    classifier: Optional[DllClassifier] = None,
    file_path: Optional[str] = None,
) -> AnalysisResult:
    """
    Analyze a byte buffer for suspicious DLL references.

    Args:
        buffer: Raw file contents
        min_length: Minimum printable run length; ignored when an extractor
            is supplied
        status_callback: Optional receiver of StatusUpdate notifications
        extractor: Preconfigured string extractor
        classifier: Preconfigured DLL classifier
        file_path: Only used to annotate errors

    Returns:
        AnalysisResult

    Raises:
        EmptyInputError: If the buffer is empty
        NoCandidatesError: If no DLL-like names were found
    """
    extractor = extractor or StringExtractor(min_length=min_length)
    classifier = classifier or DllClassifier()
    notify = _Notifier(status_callback)

    if not buffer:
        notify("read", "Input is empty, nothing to analyze.", StatusType.ERROR)
        raise EmptyInputError(file_path)

    notify("extract", "Extracting and filtering strings...", StatusType.LOADING)
    strings = extractor.extract(buffer)
    dll_names = filter_dll_names(s.value for s in strings)

    if not dll_names:
        notify("filter", "No potential DLL names found in the file's strings.", StatusType.ERROR)
        raise NoCandidatesError(file_path, strings_scanned=len(strings))

    notify("classify", f"Found {len(dll_names)} potential DLL(s). Analyzing...", StatusType.LOADING)
    logger.debug("DLLs found", extra_data={"dlls": ", ".join(dll_names)})
    result = classifier.classify(dll_names)

    notify("complete", "Analysis complete.", StatusType.SUCCESS)
    return result
