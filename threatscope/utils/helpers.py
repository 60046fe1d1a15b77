"""
Common utility functions for ThreatScope.
"""

import hashlib
from pathlib import Path
from typing import Iterable, Iterator, Optional

import humanize


def format_bytes(size: int) -> str:
    """
    Format byte size to human readable string.

    Args:
        size: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MiB")
    """
    return humanize.naturalsize(size, binary=True)


def calculate_hash(data: bytes, algorithm: str = "sha256") -> str:
    """
    Calculate hash of data.

    Args:
        data: Byte data to hash
        algorithm: Hash algorithm (md5, sha1, sha256, sha512)

    Returns:
        Hex digest string
    """
    hasher = hashlib.new(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def has_allowed_extension(file_path: Path, allowed: Iterable[str]) -> bool:
    """
    Check a file name against an extension allow-list.

    The comparison is case-sensitive, so "SAMPLE.EXE" does not match ".exe".
    """
    return any(file_path.name.endswith(ext) for ext in allowed)


def iter_files(
    folder: Path,
    recursive: bool = False,
    allowed: Optional[Iterable[str]] = None,
) -> Iterator[Path]:
    """
    Yield regular files in a folder in sorted order.

    Args:
        folder: Directory to scan
        recursive: Descend into subdirectories
        allowed: Extension allow-list; None yields every file
    """
    pattern = "**/*" if recursive else "*"
    for path in sorted(folder.glob(pattern)):
        if not path.is_file():
            continue
        if allowed is not None and not has_allowed_extension(path, allowed):
            continue
        yield path
