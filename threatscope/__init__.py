"""
ThreatScope PE Analyzer
=======================

Static heuristic scanner for Windows executables:
- Printable string extraction from raw bytes
- Readability filtering of extracted strings
- Suspicious DLL name classification
"""

__version__ = "1.0.0"
__author__ = "ThreatScope Team"
