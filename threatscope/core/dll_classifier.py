"""
Heuristic classification of DLL names found in a binary.

Readable strings are narrowed to plausible DLL file names, common Windows
system libraries are ignored, and the rest are checked against an ordered
rule table (first match wins) and an unusual-name fallback.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from ..utils.exceptions import NoCandidatesError
from ..utils.logger import get_logger

logger = get_logger("dll_classifier")

DLL_SUFFIX = re.compile(r"\.dll$", re.IGNORECASE)
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
DIGIT_RUN = re.compile(r"[0-9]{3,}")

# Names longer than this are treated as packer-generated or randomized
UNUSUAL_NAME_LENGTH = 15

COMMON_SYSTEM_DLLS = frozenset({
    "kernel32.dll",
    "user32.dll",
    "gdi32.dll",
    "ntdll.dll",
    "shell32.dll",
    "advapi32.dll",
    "ole32.dll",
    "msvcrt.dll",
    "comctl32.dll",
    "comdlg32.dll",
    "ws2_32.dll",
    "wininet.dll",
    "oleaut32.dll",
    "shlwapi.dll",
    "rpcrt4.dll",
})

NO_SUSPICIOUS_SUMMARY = (
    "No suspicious DLLs were identified. "
    "The executable appears to use standard system libraries."
)
UNUSUAL_NAMES_CAPABILITY = "unusual or randomized library names"


@dataclass(frozen=True)
class SuspicionRule:
    """A name pattern and the capability category it hints at."""

    pattern: re.Pattern
    category: str

    @classmethod
    def for_prefix(cls, prefix: str, category: str) -> "SuspicionRule":
        return cls(re.compile(re.escape(prefix) + r".*\.dll$", re.IGNORECASE), category)

    def matches(self, dll_name: str) -> bool:
        return self.pattern.search(dll_name) is not None


# Order matters: "cryptonet.dll" is cryptography, not networking
SUSPICIOUS_RULES: Tuple[SuspicionRule, ...] = (
    SuspicionRule.for_prefix("7z", "compression"),
    SuspicionRule.for_prefix("rar", "compression"),
    SuspicionRule.for_prefix("crypt", "cryptography"),
    SuspicionRule.for_prefix("inject", "injection"),
    SuspicionRule.for_prefix("hook", "hooking"),
    SuspicionRule.for_prefix("keylog", "keylogging"),
    SuspicionRule.for_prefix("screen", "screen capture"),
    SuspicionRule.for_prefix("net", "networking"),
    SuspicionRule.for_prefix("ssl", "encryption"),
    SuspicionRule.for_prefix("tor", "anonymization"),
)


class DetectionReason(Enum):
    """Why a DLL name was flagged."""
    PATTERN = "pattern"
    UNUSUAL_NAME = "unusual_name"


@dataclass(frozen=True)
class DllDetection:
    """A flagged DLL name."""

    name: str
    reason: DetectionReason
    category: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "reason": self.reason.value,
            "category": self.category,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of one DLL analysis run.

    ``potentially_suspicious_dlls`` keeps first-detection order and holds
    each name once.
    """

    potentially_suspicious_dlls: Tuple[str, ...]
    analysis_summary: str
    detections: Tuple[DllDetection, ...] = field(default=(), compare=False)
    dll_candidates: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_suspicious(self) -> bool:
        return bool(self.potentially_suspicious_dlls)

    @property
    def categories(self) -> List[str]:
        return distinct_categories(self.detections)

    def to_dict(self) -> Dict:
        return {
            "potentially_suspicious_dlls": list(self.potentially_suspicious_dlls),
            "analysis_summary": self.analysis_summary,
        }


def filter_dll_names(strings: Iterable[str]) -> List[str]:
    """
    Reduce strings to distinct plausible DLL file names.

    Values are trimmed; duplicates collapse onto their first occurrence.
    """
    names: Dict[str, None] = {}

    for value in strings:
        trimmed = value.strip()
        if len(trimmed) <= 4 or not DLL_SUFFIX.search(trimmed):
            continue
        if INVALID_FILENAME_CHARS.search(trimmed):
            continue
        names.setdefault(trimmed, None)

    return list(names)


def distinct_categories(detections: Iterable[DllDetection]) -> List[str]:
    """Distinct pattern categories in first-trigger order."""
    seen: Dict[str, None] = {}
    for detection in detections:
        if detection.category:
            seen.setdefault(detection.category, None)
    return list(seen)


def looks_unusual(dll_name: str) -> bool:
    return len(dll_name) > UNUSUAL_NAME_LENGTH or DIGIT_RUN.search(dll_name) is not None


def build_summary(flagged_count: int, categories: List[str]) -> str:
    if flagged_count == 0:
        return NO_SUSPICIOUS_SUMMARY

    capabilities = ", ".join(categories) if categories else UNUSUAL_NAMES_CAPABILITY
    return (
        f"The presence of {flagged_count} potentially suspicious DLLs suggests "
        f"capabilities related to {capabilities}, which could be indicative of "
        f"malware attempting to hide or transmit data."
    )


class DllClassifier:
    """
    Score DLL names against the allow-list and suspicion rules.

    Args:
        rules: Ordered suspicion rules, first match wins
        system_dlls: Lowercase names that are never flagged
    """

    def __init__(
        self,
        rules: Tuple[SuspicionRule, ...] = SUSPICIOUS_RULES,
        system_dlls: frozenset = COMMON_SYSTEM_DLLS,
    ):
        self.rules = rules
        self.system_dlls = system_dlls

    def match_rule(self, dll_name: str) -> Optional[SuspicionRule]:
        for rule in self.rules:
            if rule.matches(dll_name):
                return rule
        return None

    def classify_name(self, dll_name: str) -> Optional[DllDetection]:
        """Return a detection for one name, or None if it looks benign."""
        if dll_name.lower() in self.system_dlls:
            return None

        rule = self.match_rule(dll_name)
        if rule is not None:
            return DllDetection(dll_name, DetectionReason.PATTERN, rule.category)

        if looks_unusual(dll_name):
            return DllDetection(dll_name, DetectionReason.UNUSUAL_NAME)

        return None

    def classify(self, dll_names: List[str]) -> AnalysisResult:
        """
        Classify distinct DLL names.

        Raises:
            NoCandidatesError: If dll_names is empty
        """
        if not dll_names:
            raise NoCandidatesError()

        detections: Dict[str, DllDetection] = {}
        for name in dll_names:
            if name in detections:
                continue
            detection = self.classify_name(name)
            if detection is not None:
                detections[name] = detection

        result_detections = tuple(detections.values())

        logger.debug(
            f"Classified {len(dll_names)} DLL name(s)",
            extra_data={"flagged": len(result_detections)},
        )

        return AnalysisResult(
            potentially_suspicious_dlls=tuple(detections),
            analysis_summary=build_summary(
                len(result_detections), distinct_categories(result_detections)
            ),
            detections=result_detections,
            dll_candidates=tuple(dll_names),
        )
