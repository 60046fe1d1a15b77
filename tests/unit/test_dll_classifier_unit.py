import pytest

from threatscope.core.dll_classifier import (
    COMMON_SYSTEM_DLLS,
    NO_SUSPICIOUS_SUMMARY,
    SUSPICIOUS_RULES,
    DetectionReason,
    DllClassifier,
    build_summary,
    filter_dll_names,
    looks_unusual,
)
from threatscope.utils.exceptions import AnalysisError, NoCandidatesError


@pytest.fixture
def classifier():
    return DllClassifier()


# Name filtering

def test_filter_keeps_dll_names_only():
    strings = ["kernel32.dll", "notes.txt", "GetProcAddress", "USER32.DLL"]
    assert filter_dll_names(strings) == ["kernel32.dll", "USER32.DLL"]


def test_filter_trims_and_dedups_by_exact_value():
    strings = ["  evil.dll", "evil.dll\r\n", "EVIL.dll", "evil.dll"]
    assert filter_dll_names(strings) == ["evil.dll", "EVIL.dll"]


def test_filter_requires_more_than_suffix():
    assert filter_dll_names([".dll", " .dll "]) == []
    assert filter_dll_names(["a.dll"]) == ["a.dll"]


@pytest.mark.parametrize("name", [
    "C:\\Windows\\System32\\evil.dll",
    "/tmp/evil.dll",
    "evil<1>.dll",
    'say "evil.dll',
    "what?.dll",
    "star*.dll",
    "pipe|.dll",
])
def test_filter_rejects_invalid_filename_characters(name):
    assert filter_dll_names([name]) == []


def test_filter_requires_suffix_at_end():
    assert filter_dll_names(["evil.dll.bak", "evil.dllx"]) == []


# Classification

def test_allow_list_any_case(classifier):
    result = classifier.classify(["kernel32.dll", "KERNEL32.DLL", "Kernel32.Dll"])
    assert result.potentially_suspicious_dlls == ()
    assert result.analysis_summary == NO_SUSPICIOUS_SUMMARY


def test_allow_list_contents():
    assert len(COMMON_SYSTEM_DLLS) == 15
    assert "ws2_32.dll" in COMMON_SYSTEM_DLLS
    assert all(name == name.lower() for name in COMMON_SYSTEM_DLLS)


def test_first_matching_rule_wins(classifier):
    result = classifier.classify(["cryptonet.dll"])
    assert result.potentially_suspicious_dlls == ("cryptonet.dll",)
    assert result.detections[0].category == "cryptography"
    assert result.categories == ["cryptography"]


@pytest.mark.parametrize("name, category", [
    ("7zxa.dll", "compression"),
    ("unrar.dll", "compression"),
    ("libcrypto-3.dll", "cryptography"),
    ("Injector.dll", "injection"),
    ("kbdhook.dll", "hooking"),
    ("keylogger.dll", "keylogging"),
    ("screencap.dll", "screen capture"),
    ("netapi.dll", "networking"),
    ("libssl.dll", "encryption"),
    ("torlib.dll", "anonymization"),
])
def test_rule_categories(classifier, name, category):
    detection = classifier.classify_name(name)
    assert detection.reason is DetectionReason.PATTERN
    assert detection.category == category


def test_rule_table_order():
    categories = [rule.category for rule in SUSPICIOUS_RULES]
    assert categories.index("cryptography") < categories.index("networking")
    assert len(SUSPICIOUS_RULES) == 10


def test_unusual_length_heuristic(classifier):
    sixteen = "abcdefghijkl.dll"
    fifteen = "abcdefghijk.dll"
    assert len(sixteen) == 16 and len(fifteen) == 15

    detection = classifier.classify_name(sixteen)
    assert detection.reason is DetectionReason.UNUSUAL_NAME
    assert detection.category is None
    assert classifier.classify_name(fifteen) is None


def test_digit_run_heuristic():
    assert looks_unusual("safe123.dll")
    assert not looks_unusual("safe12.dll")
    assert not looks_unusual("s1a2f3.dll")


def test_allow_listed_names_skip_heuristics(classifier):
    # ws2_32 has digits and is short; advapi32 would otherwise be checked too
    assert classifier.classify_name("WS2_32.dll") is None
    assert classifier.classify_name("ADVAPI32.DLL") is None


def test_unflagged_name(classifier):
    result = classifier.classify(["helper.dll"])
    assert result.potentially_suspicious_dlls == ()
    assert result.analysis_summary == NO_SUSPICIOUS_SUMMARY
    assert result.dll_candidates == ("helper.dll",)
    assert not result.is_suspicious


def test_pattern_and_heuristic_flag_once(classifier):
    # Matches the crypt rule and is also long with a digit run
    result = classifier.classify(["cryptoprovider12345.dll"])
    assert result.potentially_suspicious_dlls == ("cryptoprovider12345.dll",)
    assert len(result.detections) == 1


def test_output_keeps_first_detection_order(classifier):
    names = ["hookmgr.dll", "kernel32.dll", "helper.dll", "safe123.dll", "cryptonet.dll"]
    result = classifier.classify(names)
    assert result.potentially_suspicious_dlls == ("hookmgr.dll", "safe123.dll", "cryptonet.dll")
    assert result.categories == ["hooking", "cryptography"]


def test_summary_names_count_and_categories(classifier):
    result = classifier.classify(["cryptonet.dll", "hookmgr.dll", "netmon.dll"])
    assert result.analysis_summary == (
        "The presence of 3 potentially suspicious DLLs suggests capabilities "
        "related to cryptography, hooking, networking, which could be indicative "
        "of malware attempting to hide or transmit data."
    )


def test_summary_for_heuristic_only_detections():
    summary = build_summary(1, [])
    assert summary.startswith("The presence of 1 potentially suspicious DLLs")
    assert "unusual or randomized library names" in summary


def test_no_names_is_a_failure(classifier):
    with pytest.raises(NoCandidatesError) as exc_info:
        classifier.classify([])
    assert isinstance(exc_info.value, AnalysisError)
    assert exc_info.value.code == "NO_CANDIDATES"


def test_result_serializes_public_contract(classifier):
    result = classifier.classify(["cryptonet.dll", "kernel32.dll"])
    assert result.to_dict() == {
        "potentially_suspicious_dlls": ["cryptonet.dll"],
        "analysis_summary": result.analysis_summary,
    }
