import json
from pathlib import Path

from threatscope.core.dll_analyzer import DllAnalyzer
from threatscope.core.report_generator import build_document, render_json, render_text
from threatscope.utils.helpers import (
    calculate_hash,
    format_bytes,
    has_allowed_extension,
    iter_files,
)


def scan_pair(tmp_path, pe_bytes, make_pe):
    good = tmp_path / "good.exe"
    good.write_bytes(pe_bytes)
    bad = tmp_path / "bad.exe"
    bad.write_bytes(make_pe("notadll.txt"))
    analyzer = DllAnalyzer()
    return [analyzer.scan(good), analyzer.scan(bad)]


def test_document_counts_failures(tmp_path, pe_bytes, make_pe):
    document = build_document(scan_pair(tmp_path, pe_bytes, make_pe))
    assert document["files_analyzed"] == 2
    assert document["files_failed"] == 1
    assert document["generator"].startswith("threatscope ")


def test_render_json_round_trips(tmp_path, pe_bytes, make_pe):
    data = json.loads(render_json(scan_pair(tmp_path, pe_bytes, make_pe)))
    good, bad = data["reports"]
    assert good["result"]["potentially_suspicious_dlls"] == ["cryptonet.dll", "hookmgr.dll"]
    assert bad["result"] is None
    assert bad["error"]["error"] == "NO_CANDIDATES"


def test_render_text(tmp_path, pe_bytes, make_pe):
    text = render_text(scan_pair(tmp_path, pe_bytes, make_pe))
    assert "Potentially suspicious DLLs (2 found)" in text
    assert "! cryptonet.dll  [cryptography]" in text
    assert "Error: Could not find any strings ending in '.dll' to analyze." in text
    assert text.endswith("2 file(s) analyzed, 1 failed.")


def test_render_text_marks_heuristic_detections(tmp_path, make_pe):
    path = tmp_path / "odd.dll"
    path.write_bytes(make_pe("safe123.dll"))
    text = render_text([DllAnalyzer().scan(path)])
    assert "! safe123.dll  [unusual name]" in text


def test_helpers():
    assert format_bytes(1024) == "1.0 KiB"
    assert calculate_hash(b"abc") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )
    assert has_allowed_extension(Path("a.dll"), [".exe", ".dll"])
    assert not has_allowed_extension(Path("a.DLL"), [".exe", ".dll"])


def test_iter_files(tmp_path):
    (tmp_path / "sub").mkdir()
    for name in ("b.exe", "a.dll", "notes.txt", "sub/c.exe"):
        (tmp_path / name).write_bytes(b"x")

    assert [p.name for p in iter_files(tmp_path)] == ["a.dll", "b.exe", "notes.txt"]
    assert [p.name for p in iter_files(tmp_path, recursive=True, allowed=[".exe", ".dll"])] == [
        "a.dll", "b.exe", "c.exe",
    ]
