"""
Printable string extraction from raw binary data.

The buffer is scanned once, byte by byte. Runs of printable bytes at least
``min_length`` long become candidates; each candidate is decoded and kept
only if the readability filter accepts it.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .readability import ReadabilityFilter
from ..utils.exceptions import ConfigurationError
from ..utils.logger import get_logger

logger = get_logger("string_extractor")

DEFAULT_MIN_LENGTH = 5

# Tab, LF, CR
_PRINTABLE_CONTROL = frozenset((9, 10, 13))


def is_printable_byte(byte: int) -> bool:
    return 32 <= byte <= 126 or byte in _PRINTABLE_CONTROL


@dataclass(frozen=True)
class CandidateRun:
    """Half-open byte range ``[start, end)`` made only of printable bytes."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ExtractedString:
    """A decoded string and the buffer range it came from."""

    value: str
    offset: int
    length: int


class StringExtractor:
    """
    Extract readable strings from a byte buffer.

    Decoding uses UTF-8 with replacement, so malformed sequences never abort
    extraction.
    """

    def __init__(
        self,
        min_length: int = DEFAULT_MIN_LENGTH,
        readability: Optional[ReadabilityFilter] = None,
    ):
        """
        Initialize string extractor.

        Args:
            min_length: Minimum printable run length considered at all
            readability: Filter applied to every decoded run

        Raises:
            ConfigurationError: If min_length is below 1
        """
        if min_length < 1:
            raise ConfigurationError(
                f"Minimum string length must be at least 1, got {min_length}",
                config_key="analysis.min_string_length",
            )
        self.min_length = min_length
        self.readability = readability or ReadabilityFilter()

    def candidate_runs(self, data: bytes) -> Iterator[CandidateRun]:
        """Yield printable runs of at least ``min_length`` bytes, in order."""
        run_start: Optional[int] = None

        for i, byte in enumerate(data):
            if is_printable_byte(byte):
                if run_start is None:
                    run_start = i
            elif run_start is not None:
                if i - run_start >= self.min_length:
                    yield CandidateRun(run_start, i)
                run_start = None

        if run_start is not None and len(data) - run_start >= self.min_length:
            yield CandidateRun(run_start, len(data))

    def decode(self, data: bytes, run: CandidateRun) -> ExtractedString:
        value = data[run.start:run.end].decode("utf-8", errors="replace")
        return ExtractedString(value=value, offset=run.start, length=run.length)

    def extract(self, data: bytes) -> List[ExtractedString]:
        """
        Extract readable strings from data.

        Args:
            data: Raw file contents

        Returns:
            Readable strings in buffer order
        """
        strings: List[ExtractedString] = []
        candidates = 0

        for run in self.candidate_runs(data):
            candidates += 1
            extracted = self.decode(data, run)
            if self.readability.is_readable(extracted.value):
                strings.append(extracted)

        logger.debug(
            f"Found {len(strings)} potentially readable strings with initial min length {self.min_length}",
            extra_data={"candidates": candidates, "rejected": candidates - len(strings)},
        )
        return strings
