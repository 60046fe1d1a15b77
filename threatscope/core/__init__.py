"""Core analysis engines for ThreatScope."""

from .base_analyzer import BaseAnalyzer, FileInfo
from .string_extractor import StringExtractor, ExtractedString, CandidateRun
from .readability import ReadabilityFilter, is_potentially_readable
from .dll_classifier import (
    AnalysisResult,
    DllClassifier,
    DllDetection,
    DetectionReason,
    SuspicionRule,
    filter_dll_names,
)
from .dll_analyzer import (
    DllAnalyzer,
    FileReport,
    StatusType,
    StatusUpdate,
    analyze,
)

__all__ = [
    "BaseAnalyzer",
    "FileInfo",
    "StringExtractor",
    "ExtractedString",
    "CandidateRun",
    "ReadabilityFilter",
    "is_potentially_readable",
    "AnalysisResult",
    "DllClassifier",
    "DllDetection",
    "DetectionReason",
    "SuspicionRule",
    "filter_dll_names",
    "DllAnalyzer",
    "FileReport",
    "StatusType",
    "StatusUpdate",
    "analyze",
]
